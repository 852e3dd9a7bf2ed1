from fastapi import APIRouter
from src.api.v1 import mcp

api_router = APIRouter()

api_router.include_router(mcp.router, prefix="/mcp", tags=["mcp"])
api_router.add_api_websocket_route("/", mcp.mcp_socket)
api_router.add_api_websocket_route("/ws", mcp.mcp_socket)
