#!/usr/bin/env python3
"""
Update Admin Password Script.

Resets an admin user's password directly in the Plex Guard SQLite store.
Usage: python scripts/update_admin.py <username> <new-password> [db-path]

PRIVILEGED OPERATION: this bypasses login and sessions entirely. Anyone who
can run it already has write access to the database file. Do not expose it
through any network-reachable interface.

Exit codes: 0 on success, 1 on bad arguments, policy failure, missing
database file, unknown username, or storage/hashing failure.
"""

import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy.exc import DBAPIError

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.app_context import load_config
from core.logging_config import setup_logging
from core.security.exceptions import CredentialError, StorageUnavailable, UserNotFound
from core.security.passwords import DEFAULT_ROUNDS
from core.services.credentials import reset_admin_password
from scripts.common import DatabaseNotFoundError, open_store, print_error, resolve_db_path

logger = logging.getLogger(__name__)

USAGE = "Usage: python scripts/update_admin.py <username> <new-password> [db-path]"


async def update_admin(
    db_path: Path,
    username: str,
    new_password: str,
    rounds: int = DEFAULT_ROUNDS,
) -> int:
    """
    Reset the password of one admin in the given database file.

    Returns:
        Rows affected.

    Raises:
        CredentialError: Policy, lookup, hashing or storage failure, including
            a failed commit when the session closes.
    """
    try:
        async with open_store(db_path) as session:
            return await reset_admin_password(session, username, new_password, rounds=rounds)
    except DBAPIError as e:
        raise StorageUnavailable(f"Admin store is unavailable: {e.orig}") from e


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = sys.argv[1:] if argv is None else argv

    if len(args) < 2 or len(args) > 3:
        print(USAGE, file=sys.stderr)
        return 1

    username, new_password = args[0], args[1]
    custom_db_path = args[2] if len(args) == 3 else None

    try:
        db_path = resolve_db_path(custom_db_path)
    except DatabaseNotFoundError as e:
        print_error(str(e))
        if custom_db_path is None:
            print("\nYou can specify a custom path as the third argument:", file=sys.stderr)
            print(f"  {USAGE}", file=sys.stderr)
        return 1

    print(f"Using database: {db_path}\n")

    rounds = int(load_config().get("security.bcrypt_rounds", DEFAULT_ROUNDS))

    try:
        rows_affected = asyncio.run(update_admin(db_path, username, new_password, rounds))
    except UserNotFound as e:
        print_error(f"No user found with username: {e.username}")
        print(f"  Rows affected: {e.rows_affected}")
        return 1
    except CredentialError as e:
        print_error(e.message)
        return 1

    print(f"✅ Successfully updated password for user: {username}")
    print(f"  Rows affected: {rows_affected}")
    return 0


if __name__ == "__main__":
    setup_logging(logging.WARNING, log_to_file=False)
    sys.exit(main())
