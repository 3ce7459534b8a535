"""
Admin Authentication Service.

Handles the admin account lifecycle for the Plex Guard console:
first-run setup, username/email login with server-side sessions,
profile updates and password changes.

Credential rules come from core.security.password_policy, the same module
the maintenance scripts use.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.app_context import ConfigLoader
from core.database.base import utcnow
from core.models import AdminSession, AdminUser
from core.security.exceptions import CredentialError
from core.security.password_policy import validate_email, validate_password, validate_username
from core.security.passwords import DEFAULT_ROUNDS, hash_password, verify_password
from core.services.credentials import check_confirmation, provision_admin_credential

logger = logging.getLogger(__name__)

# Session token size: 32 random bytes, hex encoded
SESSION_TOKEN_BYTES = 32


# =============================================================================
# Exceptions
# =============================================================================

class AuthError(CredentialError):
    """Base exception for admin authentication errors."""

    kind = "AuthError"


class AdminAlreadyExists(AuthError):
    """Raised when setup is attempted after an admin has been created."""

    kind = "AdminAlreadyExists"


class DuplicateCredential(AuthError):
    """Raised when a username or email is already taken."""

    kind = "DuplicateCredential"


class InvalidCredentials(AuthError):
    """Raised on login failure. Does not reveal which part was wrong."""

    kind = "InvalidCredentials"


class InvalidCurrentPassword(AuthError):
    """Raised when a password change gives the wrong current password."""

    kind = "InvalidCurrentPassword"


class AdminNotFound(AuthError):
    """Raised when the session's admin no longer exists."""

    kind = "AdminNotFound"


@dataclass
class AuthResult:
    """Authenticated admin plus the session created for it."""

    user: AdminUser
    session: AdminSession


def _as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Admin Auth Service
# =============================================================================

class AdminAuthService:
    """
    Service for admin setup, login sessions and credential changes.

    Every method takes the caller's AsyncSession; the service holds only
    configuration, so one instance is shared across requests.
    """

    def __init__(self, config_loader: ConfigLoader | None = None) -> None:
        """
        Initialize AdminAuthService.

        Args:
            config_loader: ConfigLoader instance for configuration.
                          If None, creates and loads a new instance.
        """
        if config_loader is not None:
            self._config_loader = config_loader
        else:
            self._config_loader = ConfigLoader()
            self._config_loader.load()

        self._bcrypt_rounds = int(
            self._config_loader.get("security.bcrypt_rounds", DEFAULT_ROUNDS))
        self._session_ttl = timedelta(
            days=int(self._config_loader.get("security.session_expire_days", 7)))

    @property
    def session_ttl(self) -> timedelta:
        """Lifetime of a newly created session."""
        return self._session_ttl

    # =========================================================================
    # Setup
    # =========================================================================

    async def has_admin_users(self, db: AsyncSession) -> bool:
        """Check if any admin user exists."""
        result = await db.execute(select(func.count()).select_from(AdminUser))
        return (result.scalar_one() or 0) > 0

    async def create_admin(
        self,
        db: AsyncSession,
        username: str,
        email: str | None,
        password: str,
        confirm_password: str,
    ) -> AuthResult:
        """
        Create the initial admin user and log it in.

        Only allowed while no admin exists.

        Raises:
            AdminAlreadyExists: If an admin account is already set up.
            DuplicateCredential: If the username or email is taken.
            CredentialValidationError: Any policy failure.
            HashingFailed: If bcrypt fails.
        """
        if await self.has_admin_users(db):
            raise AdminAlreadyExists("Admin user already exists")

        credential = await asyncio.to_thread(
            provision_admin_credential,
            username,
            email,
            password,
            confirm_password,
            self._bcrypt_rounds,
        )

        admin = AdminUser(
            username=credential.username,
            email=credential.email,
            password_hash=credential.password_hash,
        )
        db.add(admin)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateCredential("Username or email already exists") from e

        session = await self.create_session(db, admin.id)
        await db.commit()

        logger.info(f"Initial admin account created: {admin.username}")
        return AuthResult(user=admin, session=session)

    # =========================================================================
    # Login / Sessions
    # =========================================================================

    async def login(self, db: AsyncSession, username: str, password: str) -> AuthResult:
        """
        Authenticate with username (or email) and password.

        Raises:
            InvalidCredentials: Unknown user or wrong password.
        """
        stmt = select(AdminUser).where(
            or_(AdminUser.username == username, AdminUser.email == username)
        )
        result = await db.execute(stmt)
        admin = result.scalars().first()

        if admin is None:
            logger.warning("Login failed: unknown admin")
            raise InvalidCredentials("Invalid credentials")

        if not await asyncio.to_thread(verify_password, password, admin.password_hash):
            logger.warning(f"Login failed: wrong password for '{admin.username}'")
            raise InvalidCredentials("Invalid credentials")

        session = await self.create_session(db, admin.id)
        await db.commit()

        logger.info(f"Admin '{admin.username}' logged in")
        return AuthResult(user=admin, session=session)

    async def create_session(self, db: AsyncSession, user_id: str) -> AdminSession:
        """Create and flush a new session for a user."""
        now = utcnow()
        session = AdminSession(
            token=secrets.token_hex(SESSION_TOKEN_BYTES),
            user_id=user_id,
            expires_at=now + self._session_ttl,
            last_activity_at=now,
        )
        db.add(session)
        await db.flush()
        return session

    async def validate_session(self, db: AsyncSession, token: str) -> AdminSession | None:
        """
        Look up a session by token.

        Expired sessions are deleted. Valid sessions get last_activity_at
        refreshed.

        Returns:
            The session (with ``user`` loaded), or None.
        """
        if not token:
            return None

        result = await db.execute(select(AdminSession).where(AdminSession.token == token))
        session = result.scalar_one_or_none()

        if session is None:
            return None

        now = utcnow()
        if now > _as_utc(session.expires_at):
            await db.delete(session)
            await db.commit()
            logger.info("Expired session removed")
            return None

        session.last_activity_at = now
        await db.commit()
        return session

    async def logout(self, db: AsyncSession, token: str) -> None:
        """Delete the session identified by token."""
        await db.execute(
            delete(AdminSession)
            .where(AdminSession.token == token)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

    async def cleanup_expired_sessions(self, db: AsyncSession) -> int:
        """
        Delete every expired session.

        Returns:
            Number of sessions removed.
        """
        stmt = (
            delete(AdminSession)
            .where(AdminSession.expires_at < utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info(f"Cleaned up {removed} expired session(s)")
        return removed

    async def clear_all_sessions(
        self,
        db: AsyncSession,
        user_id: str,
        keep_session_id: str | None = None,
    ) -> int:
        """Delete a user's sessions, optionally keeping the current one."""
        stmt = delete(AdminSession).where(AdminSession.user_id == user_id)
        if keep_session_id:
            stmt = stmt.where(AdminSession.id != keep_session_id)
        stmt = stmt.execution_options(synchronize_session=False)
        result = await db.execute(stmt)
        return result.rowcount or 0

    # =========================================================================
    # Profile / Password
    # =========================================================================

    async def _get_admin(self, db: AsyncSession, user_id: str) -> AdminUser:
        admin = await db.get(AdminUser, user_id)
        if admin is None:
            raise AdminNotFound("User not found")
        return admin

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        username: str | None = None,
        email: str | None = None,
        avatar_url: str | None = None,
    ) -> AdminUser:
        """
        Update username, email and/or avatar.

        None leaves a field unchanged; an empty email clears it.

        Raises:
            UsernameTooShort, InvalidEmailFormat, DuplicateCredential, AdminNotFound
        """
        admin = await self._get_admin(db, user_id)

        if username is not None and username != admin.username:
            validate_username(username)
            existing = await db.execute(select(AdminUser.id).where(AdminUser.username == username))
            if existing.first() is not None:
                raise DuplicateCredential("Username already exists", field="username")
            admin.username = username

        if email is not None:
            normalized = validate_email(email)
            if normalized and normalized != admin.email:
                existing = await db.execute(select(AdminUser.id).where(AdminUser.email == normalized))
                if existing.first() is not None:
                    raise DuplicateCredential("Email already exists", field="email")
            admin.email = normalized

        if avatar_url is not None:
            admin.avatar_url = avatar_url or None

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateCredential("Username or email already exists") from e

        logger.info(f"Profile updated for admin '{admin.username}'")
        return admin

    async def update_password(
        self,
        db: AsyncSession,
        user_id: str,
        current_password: str,
        new_password: str,
        confirm_password: str,
        clear_sessions: bool = False,
        current_session_id: str | None = None,
    ) -> None:
        """
        Change an admin's password.

        Checks run in this order: confirmation equality, policy on the new
        password, then the current password. Input errors are reported
        before any bcrypt comparison, and a wrong current password is only
        reported for an otherwise acceptable request.

        Raises:
            PasswordMismatch: Confirmation differs from the new password.
            PasswordTooShort, PasswordTooLong, PasswordPolicyViolation
            InvalidCurrentPassword: Current password is wrong.
            HashingFailed, AdminNotFound
        """
        check_confirmation(new_password, confirm_password)
        validate_password(new_password, field="newPassword")

        admin = await self._get_admin(db, user_id)

        if not await asyncio.to_thread(verify_password, current_password, admin.password_hash):
            raise InvalidCurrentPassword("Current password is incorrect", field="currentPassword")

        admin.password_hash = await asyncio.to_thread(
            hash_password, new_password, self._bcrypt_rounds)

        if clear_sessions:
            removed = await self.clear_all_sessions(db, user_id, current_session_id)
            logger.info(f"Cleared {removed} other session(s) for '{admin.username}'")

        await db.commit()
        logger.info(f"Password changed for admin '{admin.username}'")

    async def confirm_password(self, db: AsyncSession, user_id: str, password: str) -> bool:
        """Re-check an admin's password before a sensitive operation."""
        admin = await self._get_admin(db, user_id)
        return await asyncio.to_thread(verify_password, password, admin.password_hash)


# Singleton instance
_auth_service: AdminAuthService | None = None


def get_admin_auth_service() -> AdminAuthService:
    """Get singleton AdminAuthService instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AdminAuthService()
    return _auth_service
