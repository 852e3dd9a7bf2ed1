"""Errors raised by the MCP subprocess bridge."""

from typing import Optional


class BridgeError(Exception):
    """Base class for failures of a bridged MCP call."""

    error_type: str = "bridge"


class ToolSpawnError(BridgeError):
    """The MCP server process could not be started."""

    error_type = "spawn"


class ToolExitError(BridgeError):
    """The MCP server exited with a non-zero code."""

    error_type = "exit"

    def __init__(self, message: str, exit_code: int, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class ToolTimeoutError(BridgeError):
    """The MCP server did not finish within the time budget."""

    error_type = "timeout"


class ToolResponseError(BridgeError):
    """The MCP server answered with a JSON-RPC error object."""

    error_type = "response"

    def __init__(self, message: str, code: Optional[int] = None, data=None):
        super().__init__(message)
        self.code = code
        self.data = data
