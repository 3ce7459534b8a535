"""
Admin Credential Service.

Provisioning and reset of admin credentials on top of the shared
credential policy (core.security.password_policy).

Trust boundary:
    reset_admin_password() is a maintenance operation. It performs NO
    session or token check and assumes the caller already has direct,
    privileged access to the admin store (e.g. a shell on the host running
    scripts/update_admin.py). It must never be wired to a network-reachable
    route.
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database.base import utcnow
from core.models.admin_user import AdminUser
from core.security.exceptions import PasswordMismatch, StorageUnavailable, UserNotFound
from core.security.password_policy import validate_email, validate_password, validate_username
from core.security.passwords import DEFAULT_ROUNDS, hash_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionedCredential:
    """Accepted admin credential, ready to be stored."""

    username: str
    email: str | None
    password_hash: str

    def __repr__(self) -> str:
        return f"ProvisionedCredential(username={self.username!r}, email={self.email!r})"


def check_confirmation(password: str, confirm_password: str, field: str = "confirmPassword") -> None:
    """
    Require the confirmation to equal the password exactly.

    Raises:
        PasswordMismatch: If the two strings differ.
    """
    if password != confirm_password:
        raise PasswordMismatch("Passwords do not match", field=field)


def provision_admin_credential(
    username: str,
    email: str | None,
    password: str,
    confirm_password: str,
    rounds: int | None = None,
) -> ProvisionedCredential:
    """
    Validate a credential candidate and hash its password.

    The confirmation is compared before the password policy runs, so a
    mismatch is always reported as PasswordMismatch.

    Args:
        username: Requested admin username.
        email: Optional email; None or "" means not provided.
        password: Plain text password.
        confirm_password: Must equal password.
        rounds: bcrypt cost factor (defaults to 12).

    Returns:
        ProvisionedCredential holding the hash, never the plaintext.

    Raises:
        UsernameTooShort, InvalidEmailFormat, PasswordMismatch,
        PasswordTooShort, PasswordTooLong, PasswordPolicyViolation,
        HashingFailed
    """
    validate_username(username)
    normalized_email = validate_email(email)
    check_confirmation(password, confirm_password)
    validate_password(password)

    password_hash = hash_password(password, rounds or DEFAULT_ROUNDS)

    logger.info(f"Provisioned admin credential for user '{username}'")
    return ProvisionedCredential(
        username=username,
        email=normalized_email,
        password_hash=password_hash,
    )


async def reset_admin_password(
    session: AsyncSession,
    username: str,
    new_password: str,
    rounds: int | None = None,
) -> int:
    """
    Overwrite an admin's password hash (maintenance path).

    Only the password policy is applied; there is no confirmation field.
    The hash and updated_at are written in one UPDATE statement keyed by
    username. Concurrent resets of the same user are last-write-wins.

    Args:
        session: Session bound to the admin store. The caller commits.
        username: Admin to update.
        new_password: Plain text replacement password.
        rounds: bcrypt cost factor (defaults to 12).

    Returns:
        Rows affected (always 1 on success).

    Raises:
        PasswordTooShort, PasswordTooLong, PasswordPolicyViolation,
        HashingFailed, UserNotFound, StorageUnavailable
    """
    validate_password(new_password)

    password_hash = await asyncio.to_thread(hash_password, new_password, rounds or DEFAULT_ROUNDS)

    stmt = (
        update(AdminUser)
        .where(AdminUser.username == username)
        .values(password_hash=password_hash, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )

    try:
        result = await session.execute(stmt)
    except (OperationalError, DBAPIError) as e:
        logger.error(f"Admin store update failed: {type(e).__name__}")
        raise StorageUnavailable(f"Admin store is unavailable: {e.orig}") from e

    rows_affected = result.rowcount or 0
    if rows_affected == 0:
        logger.warning(f"Password reset requested for unknown admin '{username}'")
        raise UserNotFound(username, rows_affected=0)

    logger.info(f"Password reset for admin '{username}' ({rows_affected} row(s) affected)")
    return rows_affected
