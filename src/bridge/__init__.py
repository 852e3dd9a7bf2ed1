"""
Subprocess bridge to the Sitecore MCP server.

Provides the bridge client, its errors and the Sitecore config adapter.
"""

from src.bridge.client import FALLBACK_TOOLS, McpBridge, parse_response
from src.bridge.errors import (
    BridgeError,
    ToolExitError,
    ToolResponseError,
    ToolSpawnError,
    ToolTimeoutError,
)
from src.bridge.schemas import ToolDescriptor, ToolListing

__all__ = [
    "McpBridge",
    "parse_response",
    "FALLBACK_TOOLS",
    "BridgeError",
    "ToolExitError",
    "ToolResponseError",
    "ToolSpawnError",
    "ToolTimeoutError",
    "ToolDescriptor",
    "ToolListing",
]
