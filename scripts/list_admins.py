#!/usr/bin/env python3
"""
List Admin Users Script.

Prints every admin account in the Plex Guard SQLite store.
Usage: python scripts/list_admins.py [db-path]
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError

from core.logging_config import setup_logging
from core.models.admin_user import AdminUser
from scripts.common import DatabaseNotFoundError, open_store, print_error, resolve_db_path

logger = logging.getLogger(__name__)


async def list_admins(db_path: Path) -> list[AdminUser]:
    """Return all admin users ordered by creation time."""
    async with open_store(db_path) as session:
        result = await session.execute(select(AdminUser).order_by(AdminUser.created_at))
        return list(result.scalars().all())


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = sys.argv[1:] if argv is None else argv

    if len(args) > 1:
        print("Usage: python scripts/list_admins.py [db-path]", file=sys.stderr)
        return 1

    try:
        db_path = resolve_db_path(args[0] if args else None)
    except DatabaseNotFoundError as e:
        print_error(str(e))
        return 1

    print(f"Using database: {db_path}\n")

    try:
        admins = asyncio.run(list_admins(db_path))
    except DBAPIError as e:
        print_error(f"Error fetching users: {e.orig}")
        return 1

    if not admins:
        print("No admin users found.")
        return 0

    print(f"Found {len(admins)} admin user(s):\n")
    for index, admin in enumerate(admins, start=1):
        print(f"[{index}] Admin User")
        print(f"    ID:         {admin.id}")
        print(f"    Username:   {admin.username}")
        print(f"    Email:      {admin.email or 'N/A'}")
        print(f"    Created:    {admin.created_at}")
        print(f"    Updated:    {admin.updated_at}")
        print("")

    return 0


if __name__ == "__main__":
    setup_logging(logging.WARNING, log_to_file=False)
    sys.exit(main())
