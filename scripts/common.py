"""
Shared helpers for the maintenance scripts.

Locates the Plex Guard SQLite file and opens standalone sessions on it,
independent of the web application's DATABASE_URL.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from core.database import create_engine_for_path, get_standalone_session

logger = logging.getLogger(__name__)

DB_FILENAME = "plex-guard.db"
DOCKER_DB_PATH = Path("/app/data") / DB_FILENAME


class DatabaseNotFoundError(Exception):
    """Raised when no admin store file can be located."""

    def __init__(self, message: str, searched: list[Path] | None = None) -> None:
        self.searched = searched or []
        super().__init__(message)


def default_db_locations(cwd: Path | None = None) -> list[Path]:
    """Default search order: Docker volume, working dir, ./backend."""
    cwd = cwd or Path.cwd()
    return [
        DOCKER_DB_PATH,
        cwd / DB_FILENAME,
        cwd / "backend" / DB_FILENAME,
    ]


def resolve_db_path(
    custom_path: str | None = None,
    candidates: Iterable[Path] | None = None,
) -> Path:
    """
    Find the admin store file.

    Args:
        custom_path: Explicit path given on the command line. Must exist.
        candidates: Override for the default search locations.

    Raises:
        DatabaseNotFoundError: If the file cannot be found.
    """
    if custom_path:
        path = Path(custom_path)
        if not path.is_file():
            raise DatabaseNotFoundError(
                f"Database file not found at specified path: {custom_path}",
                searched=[path],
            )
        return path

    searched = list(candidates) if candidates is not None else default_db_locations()
    for path in searched:
        if path.is_file():
            return path

    raise DatabaseNotFoundError(
        "Cannot find database file in default locations.",
        searched=searched,
    )


@asynccontextmanager
async def open_store(db_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """Session on a specific SQLite file; commits on success, disposes the engine."""
    engine = create_engine_for_path(db_path)
    try:
        async with get_standalone_session(engine) as session:
            yield session
    finally:
        await engine.dispose()


def print_error(message: str) -> None:
    print(f"❌ Error: {message}", file=sys.stderr)
