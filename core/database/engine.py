"""
Database Engine Management Module.

Provides a singleton AsyncEngine for the application, plus standalone
engines bound to an explicit SQLite file for the maintenance scripts.
Uses configuration from core.app_context.ConfigLoader.
"""

import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from core.app_context import ConfigLoader

_logger = logging.getLogger(__name__)

# Global engine instance (singleton)
_engine: AsyncEngine | None = None


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement (needed for session cascade deletes)."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    In-memory SQLite databases share one connection (StaticPool) so every
    session sees the same data.
    """
    kwargs: dict = {"echo": False}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+aiosqlite://"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_async_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        _enable_sqlite_foreign_keys(engine)

    return engine


def sqlite_url_for_path(db_path: str | Path) -> str:
    """Build an aiosqlite URL for a database file path."""
    return f"sqlite+aiosqlite:///{Path(db_path).resolve()}"


def create_engine_for_path(db_path: str | Path) -> AsyncEngine:
    """
    Create a standalone engine bound to an existing SQLite file.

    Used by the maintenance scripts, which operate directly on the store
    outside the web application. The caller owns the engine and must
    dispose it.
    """
    return build_engine(sqlite_url_for_path(db_path))


def get_engine() -> AsyncEngine:
    """
    Get or create the async database engine (singleton).

    Returns:
        AsyncEngine: SQLAlchemy async engine instance.
    """
    global _engine

    if _engine is None:
        config_loader = ConfigLoader()
        config_loader.load()
        database_url = config_loader.get("database.url", "")

        _engine = build_engine(str(database_url))
        _logger.info("Database engine created")

    return _engine


async def close_engine() -> None:
    """
    Close the database engine and release all connections.

    Should be called during application shutdown.
    """
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None
