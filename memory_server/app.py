"""
FastAPI application factory and configuration.

Creates and configures the main FastAPI application with:
- Request logging middleware
- Health routes
- The MCP streamable HTTP endpoint
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from memory_core.memory.factory import get_message_store
from memory_server import __version__
from memory_server.config import get_server_settings
from memory_server.middleware import RequestLoggingMiddleware
from memory_server.routes import health_router
from memory_server.tools import create_mcp_server


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Loads the message store before serving; a StorageError here aborts
    startup. Runs the MCP session manager for the lifetime of the app.
    """
    # Startup
    logger.info("Starting MCP Memory Server...")

    store = app.state.store
    store.initialize()

    try:
        async with app.state.mcp.session_manager.run():
            logger.info(f"MCP Memory Server v{__version__} started successfully")
            yield

            # Shutdown
            logger.info("Shutting down MCP Memory Server...")
    finally:
        store.close()
        logger.info("MCP Memory Server shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_server_settings()
    store = get_message_store()
    mcp = create_mcp_server(store, settings)
    # Builds the session manager used by lifespan()
    mcp_app = mcp.streamable_http_app()

    app = FastAPI(
        title=settings.server_name,
        description="MCP tools for short-lived conversation memory",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.mcp = mcp

    app.add_middleware(RequestLoggingMiddleware)

    # Health routes at root level
    app.include_router(health_router)

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root() -> dict:
        """Root endpoint with server information."""
        return {
            "name": settings.server_name,
            "version": __version__,
            "mcp": settings.endpoint_path,
            "health": "/health",
        }

    # MCP transport last so the routes above take precedence
    app.mount("/", mcp_app)

    return app


# Create application instance
app = create_app()
