#!/usr/bin/env python3
"""
Create Admin User Script.

CLI tool for creating an administrator account in the configured database
(DATABASE_URL). Applies the same credential policy as the setup page.
Usage: python scripts/create_admin.py [<username> [<password>]]
"""

import asyncio
import logging
import sys
from pathlib import Path
from getpass import getpass

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import or_, select

from core.app_context import load_config
from core.database import close_db_connections, get_standalone_session, init_database
from core.logging_config import setup_logging
from core.models.admin_user import AdminUser
from core.security.exceptions import CredentialError
from core.security.passwords import DEFAULT_ROUNDS
from core.services.credentials import ProvisionedCredential, provision_admin_credential

logger = logging.getLogger(__name__)


async def create_admin(credential: ProvisionedCredential) -> bool:
    """
    Create an admin user in the database.

    Args:
        credential: Validated credential with the password already hashed.

    Returns:
        bool: True if created successfully
    """
    await init_database()

    try:
        async with get_standalone_session() as session:
            # Check if username or email exists
            conditions = [AdminUser.username == credential.username]
            if credential.email:
                conditions.append(AdminUser.email == credential.email)
            result = await session.execute(select(AdminUser.id).where(or_(*conditions)))

            if result.first() is not None:
                print(f"❌ Error: Username '{credential.username}' or its email already exists.")
                return False

            session.add(AdminUser(
                username=credential.username,
                email=credential.email,
                password_hash=credential.password_hash,
            ))
    finally:
        await close_db_connections()

    print(f"✅ Admin user '{credential.username}' created successfully.")
    return True


def _prompt_passwords() -> tuple[str, str]:
    password = getpass("Password: ")
    password_confirm = getpass("Confirm password: ")
    return password, password_confirm


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = sys.argv[1:] if argv is None else argv
    email: str | None = None

    if len(args) == 2:
        # Non-interactive mode: python create_admin.py <username> <password>
        username, password = args
        password_confirm = password
    elif len(args) == 1:
        # Semi-interactive: python create_admin.py <username>
        username = args[0]
        password, password_confirm = _prompt_passwords()
    elif not args:
        # Fully interactive
        print("=== Create Admin User ===")
        username = input("Username: ").strip()
        email = input("Email (optional): ").strip() or None
        password, password_confirm = _prompt_passwords()
    else:
        print("Usage: python scripts/create_admin.py [<username> [<password>]]", file=sys.stderr)
        return 1

    rounds = int(load_config().get("security.bcrypt_rounds", DEFAULT_ROUNDS))

    try:
        credential = provision_admin_credential(
            username, email, password, password_confirm, rounds=rounds
        )
    except CredentialError as e:
        print(f"❌ Error: {e.message}")
        return 1

    success = asyncio.run(create_admin(credential))
    return 0 if success else 1


if __name__ == "__main__":
    setup_logging(logging.WARNING, log_to_file=False)
    sys.exit(main())
