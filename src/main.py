from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging
import uvicorn
from src.api.router import api_router
from src.api.schemas import HealthResponse
from src.bridge import McpBridge
from src.config import Settings, settings as default_settings

logger = logging.getLogger("sitecore_bridge")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one bridge instance."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown logic"""
        app.state.bridge = McpBridge.from_settings(settings)
        logger.info(f"🚀 SMART MCP Server running on port {settings.PORT}")
        logger.info(f"Health check: http://localhost:{settings.PORT}/health")
        logger.info(f"MCP Tools: http://localhost:{settings.PORT}/mcp/tools")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"MCP command: {' '.join(settings.MCP_COMMAND)}")
        yield
        logger.info("🛑 Shutting down gracefully")

    app = FastAPI(
        title="SMART MCP Sitecore Server",
        description="HTTP/WebSocket bridge to the Sitecore MCP server",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Include API routes
    app.include_router(api_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(
            status="ok",
            service=settings.SERVICE_NAME,
            timestamp=datetime.now(timezone.utc).isoformat(),
            environment=settings.ENVIRONMENT
        )

    return app


logging.basicConfig(
    level=default_settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG
    )
