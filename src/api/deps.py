"""FastAPI dependencies shared by the API routes."""

from starlette.requests import HTTPConnection

from src.bridge import McpBridge


def get_bridge(connection: HTTPConnection) -> McpBridge:
    """
    Bridge created in the application lifespan.

    Works for both HTTP and WebSocket routes since both are HTTPConnections.
    """
    return connection.app.state.bridge
