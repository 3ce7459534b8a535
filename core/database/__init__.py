"""
Core Database Package.

Provides centralized database management for the application.
"""

from core.database.base import Base, TimestampMixin, UUIDPrimaryKey, CreatedAt, UpdatedAt, utcnow
from core.database.engine import (
    build_engine,
    close_engine,
    create_engine_for_path,
    get_engine,
    sqlite_url_for_path,
)
from core.database.session import (
    DBSession,
    close_db_connections,
    get_db_session,
    get_session_factory,
    get_standalone_session,
    init_database,
    make_session_factory,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKey",
    "CreatedAt",
    "UpdatedAt",
    "utcnow",
    # Engine
    "build_engine",
    "close_engine",
    "create_engine_for_path",
    "get_engine",
    "sqlite_url_for_path",
    # Session
    "DBSession",
    "close_db_connections",
    "get_db_session",
    "get_session_factory",
    "get_standalone_session",
    "init_database",
    "make_session_factory",
]
