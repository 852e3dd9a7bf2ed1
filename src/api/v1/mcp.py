from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from src.api.deps import get_bridge
from src.api.schemas import ExecuteRequest, ExecuteResponse, ToolsResponse, ErrorResponse
from src.bridge import McpBridge
from typing import Any, Dict, Set
from datetime import datetime, timezone
import asyncio
import json
import logging

logger = logging.getLogger("sitecore_bridge.api")

router = APIRouter()

"""
MCP API
=======

POST /mcp/execute
-----------------
Run one tool on the Sitecore MCP server.

Client sends:
{
    "tool": "string",
    "arguments": {"instanceUrl": "...", "username": "...", ...}
}

GET /mcp/tools
--------------
Tools advertised by the Sitecore MCP server.

WebSocket (/ and /ws)
---------------------
Client sends, any number of times per connection:
{
    "id": "any",
    "method": "mcp/execute",
    "tool": "string",
    "arguments": {}
}

Server replies:
- {"id": ..., "success": true, "data": ...}
- {"id": ..., "success": false, "error": "..."}
"""

@router.post("/execute", response_model=ExecuteResponse)
async def execute_tool(request: ExecuteRequest, bridge: McpBridge = Depends(get_bridge)):
    """
    Execute an MCP tool through a fresh server process.
    """
    if not request.tool:
        return JSONResponse(status_code=400, content={"error": "Tool name is required"})

    try:
        logger.info(f"Executing MCP tool: {request.tool}")
        result = await bridge.execute_tool(request.tool, request.arguments)

        return ExecuteResponse(
            tool=request.tool,
            arguments=request.arguments,
            data=result,
            timestamp=_get_timestamp()
        )

    except Exception as e:
        logger.error(f"MCP execution error: {e}")
        error = ErrorResponse(
            error=str(e),
            tool=request.tool,
            arguments=request.arguments,
            timestamp=_get_timestamp()
        )
        return JSONResponse(status_code=500, content=error.model_dump())


@router.get("/tools", response_model=ToolsResponse)
async def list_tools(bridge: McpBridge = Depends(get_bridge)):
    """
    List the tools of the Sitecore MCP server.
    """
    try:
        listing = await bridge.list_tools()
        return ToolsResponse(
            tools=listing.tools,
            source=listing.source,
            timestamp=_get_timestamp()
        )

    except Exception as e:
        logger.error(f"Error listing MCP tools: {e}")
        error = ErrorResponse(error=str(e), timestamp=_get_timestamp())
        return JSONResponse(
            status_code=500,
            content=error.model_dump(exclude_none=True)
        )


async def mcp_socket(websocket: WebSocket, bridge: McpBridge = Depends(get_bridge)):
    """
    WebSocket endpoint for executing MCP tools.

    Every message runs in its own task, so a slow tool does not hold up the
    messages behind it. Replies carry the request id and may arrive out of
    order. Tasks still running when the client disconnects are cancelled.
    """
    await websocket.accept()
    logger.info("WebSocket client connected")

    send_lock = asyncio.Lock()
    pending: Set[asyncio.Task] = set()

    async def reply_to(message: str):
        reply = await _handle_socket_message(message, bridge)
        try:
            async with send_lock:
                await websocket.send_json(reply)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning(f"Could not deliver reply {reply.get('id')}: {e}")

    try:
        while True:
            message = await websocket.receive_text()
            task = asyncio.create_task(reply_to(message))
            pending.add(task)
            task.add_done_callback(pending.discard)

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    finally:
        for task in list(pending):
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


async def _handle_socket_message(message: str, bridge: McpBridge) -> Dict[str, Any]:
    """
    Turn one client message into its reply.

    Args:
        message: Raw text frame from the client
        bridge: Bridge used to run the tool

    Returns:
        Reply envelope carrying the request id
    """
    try:
        request = json.loads(message)
    except ValueError as e:
        return {"id": None, "success": False, "error": f"Invalid JSON: {e}"}

    if not isinstance(request, dict):
        return {"id": None, "success": False, "error": "Message must be a JSON object"}

    request_id = request.get("id")
    method = request.get("method")

    if method != "mcp/execute":
        return {"id": request_id, "success": False, "error": f"Unknown method: {method}"}

    tool = request.get("tool")
    if not tool:
        return {"id": request_id, "success": False, "error": "Tool name is required"}

    try:
        result = await bridge.execute_tool(tool, request.get("arguments") or {})
        return {"id": request_id, "success": True, "data": result}
    except Exception as e:
        logger.error(f"WebSocket MCP execution error: {e}")
        return {"id": request_id, "success": False, "error": str(e)}


def _get_timestamp() -> str:
    """Get current ISO timestamp."""
    return datetime.now(timezone.utc).isoformat()
