"""
Plex Guard - Entry Point.

ASGI application for uvicorn execution.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 3001 --reload

Or run directly:
    python main.py
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI

from core.app_context import AppContext
from core.database import close_db_connections, get_standalone_session, init_database
from core.http_client import create_http_client_context
from core.logging_config import setup_logging
from core.server import create_base_app
from core.services.auth import get_admin_auth_service


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------


def create_app_context() -> AppContext:
    """Create and configure the AppContext."""
    return AppContext()


def create_fastapi_app(context: AppContext) -> FastAPI:
    """Create the FastAPI application with all routers configured."""
    app = create_base_app(context)
    app.router.lifespan_context = lifespan
    return app


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger(__name__)
    context: AppContext = app.state.context

    logger.info("Starting Plex Guard...")

    timeout = context.config.get("backend.timeout", 10.0)
    async with create_http_client_context(app, timeout=timeout) as http_manager:
        logger.info("HTTP client initialized (stored in app.state for DI)")

        try:
            await init_database()
            logger.info("Database initialized")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

        async with get_standalone_session() as session:
            await get_admin_auth_service().cleanup_expired_sessions(session)

        context.log_event("Application started successfully", "SUCCESS")

        yield

        logger.info("Shutting down Plex Guard...")

        await close_db_connections()
        logger.info("Cleanup complete")


# -----------------------------------------------------------------------------
# Module-level Application Instance
# -----------------------------------------------------------------------------

_context = create_app_context()

setup_logging(_context.config.get("app.log_level", "INFO"))

# Export for uvicorn
app = create_fastapi_app(_context)


# -----------------------------------------------------------------------------
# Direct Execution
# -----------------------------------------------------------------------------


def main() -> None:
    """Run the application directly with uvicorn."""
    host = _context.config.get("server.host", "127.0.0.1")
    port = _context.config.get("server.port", 3001)
    debug = _context.config.get("app.debug", False)

    uvicorn_config = {
        "host": host,
        "port": port,
        "reload": debug,
        "log_level": "warning",  # Suppress uvicorn info logs
        "access_log": False,     # Disable uvicorn access logs
    }

    if debug:
        uvicorn_config["reload_excludes"] = [
            "logs/*",
            "**/__pycache__/*",
            "**/*.pyc",
            ".venv/*",
            "*.log",
            "*.db",
        ]

    uvicorn.run("main:app", **uvicorn_config)


if __name__ == "__main__":
    main()
