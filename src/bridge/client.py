import asyncio
import contextlib
import json
import logging
import os
import time
from typing import Dict, Any, Optional, List

from src.config import Settings, settings as default_settings
from src.bridge.schemas import JsonRpcRequest, ProcessOutcome, ToolDescriptor, ToolListing
from src.bridge.errors import ToolExitError, ToolResponseError, ToolSpawnError, ToolTimeoutError
from src.bridge.ephemeral import EphemeralConfigFile
from src.bridge.sitecore import (
    SitecoreConfig,
    environment_summary,
    redact,
    to_config_document,
    to_environment,
)

logger = logging.getLogger("sitecore_bridge.bridge")

# Served by list_tools when the server answers with something unparseable
FALLBACK_TOOLS: List[Dict[str, str]] = [
    {"name": "item-service-get-item", "description": "Get a Sitecore item"},
    {"name": "item-service-search", "description": "Search Sitecore items"},
    {"name": "template-analysis", "description": "Analyze Sitecore templates"},
    {"name": "media-analysis", "description": "Analyze media library"},
    {"name": "performance-analysis", "description": "Analyze performance"},
    {"name": "security-analysis", "description": "Analyze security"},
]


def parse_response(output: str) -> Dict[str, Any]:
    """
    Extract the JSON-RPC response from the server's stdout.

    The whole output is tried first; servers that also print log lines are
    handled by falling back to the last line holding a JSON object.

    Raises:
        ValueError: if no JSON object can be found
    """
    text = output.strip()
    try:
        response = json.loads(text)
    except ValueError:
        response = None
        for line in reversed(text.splitlines()):
            try:
                candidate = json.loads(line)
            except ValueError:
                continue
            if isinstance(candidate, dict):
                response = candidate
                break
        if response is None:
            raise ValueError("No JSON-RPC response found in MCP server output")

    if not isinstance(response, dict):
        raise ValueError("MCP server output is not a JSON object")
    return response


class McpBridge:
    """
    Runs the Sitecore MCP server as a child process, one process per call.

    Each call writes a single JSON-RPC request line to the child's stdin,
    closes it, and waits for the child to exit within the time budget.
    """

    def __init__(
        self,
        command: Optional[List[str]] = None,
        timeout: float = default_settings.MCP_TIMEOUT_SECONDS,
        kill_grace: float = default_settings.MCP_KILL_GRACE_SECONDS,
        config_dir: str = default_settings.MCP_CONFIG_DIR,
        max_concurrency: Optional[int] = default_settings.MAX_CONCURRENT_PROCESSES,
    ):
        self.command = list(command or default_settings.MCP_COMMAND)
        self.timeout = timeout
        self.kill_grace = kill_grace
        self.config_dir = config_dir
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "McpBridge":
        return cls(
            command=settings.MCP_COMMAND,
            timeout=settings.MCP_TIMEOUT_SECONDS,
            kill_grace=settings.MCP_KILL_GRACE_SECONDS,
            config_dir=settings.MCP_CONFIG_DIR,
            max_concurrency=settings.MAX_CONCURRENT_PROCESSES,
        )

    async def execute_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call one tool on the MCP server.

        Args:
            tool_name: Name of the MCP tool
            arguments: Tool arguments, including Sitecore connection details

        Returns:
            The JSON-RPC `result`, or a raw-output payload if stdout was not JSON

        Raises:
            ToolSpawnError: the server could not be started
            ToolTimeoutError: the server did not exit in time
            ToolExitError: the server exited with a non-zero code
            ToolResponseError: the server answered with a JSON-RPC error
        """
        if arguments is None:
            arguments = {}

        config = SitecoreConfig.from_arguments(arguments)
        config_file = EphemeralConfigFile(to_config_document(config), self.config_dir)

        with config_file as config_path:
            logger.debug(f"Config contents: {json.dumps(redact(config_file.document), indent=2)}")

            env = {**os.environ, **to_environment(config, config_path)}
            logger.info(f"Starting MCP server with environment: {environment_summary(env)}")

            argv = [*self.command, "--config", config_path]
            request = JsonRpcRequest(
                method="tools/call",
                params={"name": tool_name, "arguments": arguments},
            )
            outcome = await self._run(argv, request, env, "MCP tool execution timed out")

        if outcome.exit_code != 0:
            raise ToolExitError(
                f"MCP server exited with code {outcome.exit_code}. Error: {outcome.stderr}",
                exit_code=outcome.exit_code,
                stderr=outcome.stderr,
            )

        try:
            response = parse_response(outcome.stdout)
        except ValueError as e:
            logger.error(f"Failed to parse MCP response: {e}")
            logger.info(f"Raw output: {outcome.stdout}")
            return {
                "rawOutput": outcome.stdout,
                "tool": tool_name,
                "success": True,
            }

        # Any error member fails the call, even an empty one
        if "error" in response and response["error"] is not None:
            error = response["error"]
            if isinstance(error, dict):
                raise ToolResponseError(
                    error.get("message") or "MCP tool execution failed",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise ToolResponseError(str(error) or "MCP tool execution failed")

        return response.get("result")

    async def list_tools(self) -> ToolListing:
        """
        Ask the MCP server for its tools.

        Falls back to a fixed catalogue, marked with source="fallback", when the
        server exits cleanly but its answer cannot be parsed.
        """
        request = JsonRpcRequest(method="tools/list")
        outcome = await self._run(
            list(self.command), request, dict(os.environ), "MCP tool listing timed out"
        )

        if outcome.exit_code != 0:
            raise ToolExitError(
                f"Failed to list tools: {outcome.exit_code}",
                exit_code=outcome.exit_code,
                stderr=outcome.stderr,
            )

        try:
            response = parse_response(outcome.stdout)
            result = response.get("result")
            if response.get("error") or not isinstance(result, dict):
                logger.warning(f"MCP server returned no tool list: {response.get('error')}")
                return ToolListing(tools=[], source="server")
            tools = [ToolDescriptor.model_validate(tool) for tool in result.get("tools") or []]
        except ValueError as e:
            logger.warning(f"Unparseable tools/list response, serving fallback catalogue: {e}")
            return ToolListing(
                tools=[ToolDescriptor(**tool) for tool in FALLBACK_TOOLS],
                source="fallback",
            )

        return ToolListing(tools=tools, source="server")

    async def _run(
        self,
        argv: List[str],
        request: JsonRpcRequest,
        env: Dict[str, str],
        timeout_message: str,
    ) -> ProcessOutcome:
        """Spawn the server, feed it one request and collect its output."""
        slot = self._semaphore if self._semaphore is not None else contextlib.nullcontext()
        async with slot:
            logger.info(f"Starting MCP server with args: {argv}")
            started = time.monotonic()
            try:
                process = await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    env=env,
                )
            except OSError as e:
                logger.error(f"Failed to start MCP server: {e}")
                raise ToolSpawnError(f"Failed to start MCP server: {e}") from e

            try:
                stdout, stderr = await asyncio.wait_for(
                    process.communicate(request.to_line().encode("utf-8")),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                logger.error(f"MCP server (pid {process.pid}) exceeded {self.timeout}s, terminating")
                await self._terminate(process)
                raise ToolTimeoutError(timeout_message) from None
            except asyncio.CancelledError:
                await self._terminate(process)
                raise

            outcome = ProcessOutcome(
                stdout=stdout.decode("utf-8", errors="replace"),
                stderr=stderr.decode("utf-8", errors="replace"),
                exit_code=process.returncode,
                duration_ms=int((time.monotonic() - started) * 1000),
            )

        logger.debug(f"MCP Server stdout: {outcome.stdout}")
        if outcome.stderr:
            logger.debug(f"MCP Server stderr: {outcome.stderr}")
        logger.info(f"MCP server exited with code {outcome.exit_code} in {outcome.duration_ms}ms")
        return outcome

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """SIGTERM the child, then SIGKILL it if it outlives the grace period."""
        if process.returncode is not None:
            return
        try:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=self.kill_grace)
            except asyncio.TimeoutError:
                logger.warning(f"MCP server (pid {process.pid}) ignored SIGTERM, killing")
                process.kill()
                await process.wait()
        except ProcessLookupError:
            pass
