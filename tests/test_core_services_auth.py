"""
Unit Tests for core.services.auth.

Tests admin setup, login sessions, profile updates and password changes
against an in-memory SQLite store.
"""

import pytest
from datetime import timedelta
from sqlalchemy import func, select

from core.database.base import utcnow
from core.models import AdminSession, AdminUser
from core.security.exceptions import (
    InvalidEmailFormat,
    PasswordMismatch,
    PasswordPolicyViolation,
    UsernameTooShort,
)
from core.security.passwords import verify_password
from core.services.auth import (
    AdminAlreadyExists,
    AdminAuthService,
    AdminNotFound,
    DuplicateCredential,
    InvalidCredentials,
    InvalidCurrentPassword,
)

VALID_PASSWORD = "Abcdef123456!"
OTHER_VALID_PASSWORD = "Zyxwvu987654#"


@pytest.fixture
def auth_service(config_loader):
    """AdminAuthService using the test configuration (bcrypt cost 4)."""
    return AdminAuthService(config_loader)


async def _session_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(AdminSession))
    return result.scalar_one()


class TestSetup:
    """Tests for first-run admin creation."""

    @pytest.mark.asyncio
    async def test_no_admin_initially(self, auth_service, db_session):
        assert await auth_service.has_admin_users(db_session) is False

    @pytest.mark.asyncio
    async def test_create_admin_returns_user_and_session(self, auth_service, db_session):
        result = await auth_service.create_admin(
            db_session, "admin", "admin@plexguard.io", VALID_PASSWORD, VALID_PASSWORD
        )

        assert result.user.username == "admin"
        assert result.user.email == "admin@plexguard.io"
        assert verify_password(VALID_PASSWORD, result.user.password_hash)
        assert len(result.session.token) == 64
        assert result.session.user_id == result.user.id
        assert await auth_service.has_admin_users(db_session) is True

    @pytest.mark.asyncio
    async def test_create_admin_without_email(self, auth_service, db_session):
        result = await auth_service.create_admin(
            db_session, "admin", "", VALID_PASSWORD, VALID_PASSWORD
        )
        assert result.user.email is None

    @pytest.mark.asyncio
    async def test_second_admin_rejected(self, auth_service, db_session, make_admin):
        """Test setup is refused once an admin exists."""
        await make_admin(db_session)

        with pytest.raises(AdminAlreadyExists):
            await auth_service.create_admin(
                db_session, "second", None, VALID_PASSWORD, VALID_PASSWORD
            )

    @pytest.mark.asyncio
    async def test_validation_errors_propagate(self, auth_service, db_session):
        with pytest.raises(UsernameTooShort):
            await auth_service.create_admin(db_session, "ab", None, VALID_PASSWORD, VALID_PASSWORD)

        with pytest.raises(PasswordMismatch):
            await auth_service.create_admin(
                db_session, "admin", None, VALID_PASSWORD, OTHER_VALID_PASSWORD
            )

        with pytest.raises(PasswordPolicyViolation):
            await auth_service.create_admin(
                db_session, "admin", None, "Abcdef123456", "Abcdef123456"
            )

        assert await auth_service.has_admin_users(db_session) is False


class TestLogin:
    """Tests for login() and session handling."""

    @pytest.mark.asyncio
    async def test_login_by_username(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        result = await auth_service.login(db_session, "admin", VALID_PASSWORD)

        assert result.user.id == admin.id
        assert result.session.user_id == admin.id

    @pytest.mark.asyncio
    async def test_login_by_email(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        result = await auth_service.login(db_session, "admin@plexguard.io", VALID_PASSWORD)

        assert result.user.id == admin.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service, db_session, make_admin):
        await make_admin(db_session)

        with pytest.raises(InvalidCredentials):
            await auth_service.login(db_session, "admin", OTHER_VALID_PASSWORD)

    @pytest.mark.asyncio
    async def test_unknown_user_same_error(self, auth_service, db_session, make_admin):
        """Test unknown users get the same error as a wrong password."""
        await make_admin(db_session)

        with pytest.raises(InvalidCredentials) as exc_info:
            await auth_service.login(db_session, "nobody", VALID_PASSWORD)

        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_validate_session(self, auth_service, db_session, make_admin):
        await make_admin(db_session)
        result = await auth_service.login(db_session, "admin", VALID_PASSWORD)

        session = await auth_service.validate_session(db_session, result.session.token)

        assert session is not None
        assert session.user.username == "admin"

    @pytest.mark.asyncio
    async def test_validate_unknown_token(self, auth_service, db_session):
        assert await auth_service.validate_session(db_session, "0" * 64) is None
        assert await auth_service.validate_session(db_session, "") is None

    @pytest.mark.asyncio
    async def test_expired_session_deleted(self, auth_service, db_session, make_admin):
        """Test an expired session is rejected and removed."""
        await make_admin(db_session)
        result = await auth_service.login(db_session, "admin", VALID_PASSWORD)

        result.session.expires_at = utcnow() - timedelta(minutes=1)
        await db_session.commit()

        assert await auth_service.validate_session(db_session, result.session.token) is None
        assert await _session_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_logout_removes_session(self, auth_service, db_session, make_admin):
        await make_admin(db_session)
        result = await auth_service.login(db_session, "admin", VALID_PASSWORD)

        await auth_service.logout(db_session, result.session.token)

        assert await _session_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_cleanup_expired_sessions(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)
        live = await auth_service.create_session(db_session, admin.id)
        stale = await auth_service.create_session(db_session, admin.id)
        stale.expires_at = utcnow() - timedelta(days=1)
        await db_session.commit()

        removed = await auth_service.cleanup_expired_sessions(db_session)

        assert removed == 1
        remaining = await db_session.execute(select(AdminSession.token))
        assert remaining.scalars().all() == [live.token]


class TestUpdateProfile:
    """Tests for update_profile()."""

    @pytest.mark.asyncio
    async def test_update_fields(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        updated = await auth_service.update_profile(
            db_session,
            admin.id,
            username="root-admin",
            email="root@plexguard.io",
            avatar_url="https://cdn.plexguard.io/a.png",
        )

        assert updated.username == "root-admin"
        assert updated.email == "root@plexguard.io"
        assert updated.avatar_url == "https://cdn.plexguard.io/a.png"

    @pytest.mark.asyncio
    async def test_empty_email_clears(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        updated = await auth_service.update_profile(db_session, admin.id, email="")

        assert updated.email is None

    @pytest.mark.asyncio
    async def test_duplicate_username(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)
        await make_admin(db_session, username="operator", email="ops@plexguard.io")

        with pytest.raises(DuplicateCredential) as exc_info:
            await auth_service.update_profile(db_session, admin.id, username="operator")

        assert exc_info.value.field == "username"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)
        await make_admin(db_session, username="operator", email="ops@plexguard.io")

        with pytest.raises(DuplicateCredential) as exc_info:
            await auth_service.update_profile(db_session, admin.id, email="ops@plexguard.io")

        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_invalid_values(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        with pytest.raises(UsernameTooShort):
            await auth_service.update_profile(db_session, admin.id, username="ab")
        with pytest.raises(InvalidEmailFormat):
            await auth_service.update_profile(db_session, admin.id, email="nope")

    @pytest.mark.asyncio
    async def test_missing_user(self, auth_service, db_session):
        with pytest.raises(AdminNotFound):
            await auth_service.update_profile(db_session, "missing-id", username="admin")


class TestUpdatePassword:
    """Tests for update_password() and confirm_password()."""

    @pytest.mark.asyncio
    async def test_change_password(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        await auth_service.update_password(
            db_session, admin.id, VALID_PASSWORD, OTHER_VALID_PASSWORD, OTHER_VALID_PASSWORD
        )

        stored = await db_session.get(AdminUser, admin.id)
        assert verify_password(OTHER_VALID_PASSWORD, stored.password_hash)

        with pytest.raises(InvalidCredentials):
            await auth_service.login(db_session, "admin", VALID_PASSWORD)
        assert await auth_service.login(db_session, "admin", OTHER_VALID_PASSWORD)

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        with pytest.raises(InvalidCurrentPassword) as exc_info:
            await auth_service.update_password(
                db_session, admin.id, "Wrong1234567!", OTHER_VALID_PASSWORD, OTHER_VALID_PASSWORD
            )

        assert exc_info.value.field == "currentPassword"

    @pytest.mark.asyncio
    async def test_mismatch_checked_first(self, auth_service, db_session, make_admin):
        """Test mismatch is reported even with a wrong current password."""
        admin = await make_admin(db_session)

        with pytest.raises(PasswordMismatch):
            await auth_service.update_password(
                db_session, admin.id, "Wrong1234567!", OTHER_VALID_PASSWORD, VALID_PASSWORD
            )

    @pytest.mark.asyncio
    async def test_new_password_policy(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        with pytest.raises(PasswordPolicyViolation) as exc_info:
            await auth_service.update_password(
                db_session, admin.id, VALID_PASSWORD, "Abcdef123456", "Abcdef123456"
            )

        assert exc_info.value.field == "newPassword"

    @pytest.mark.asyncio
    async def test_policy_checked_before_current_password(self, auth_service, db_session, make_admin):
        """Test a weak new password is reported even when the current one is wrong."""
        admin = await make_admin(db_session)

        with pytest.raises(PasswordPolicyViolation) as exc_info:
            await auth_service.update_password(
                db_session, admin.id, "Wrong1234567!", "Abcdef123456", "Abcdef123456"
            )

        assert exc_info.value.field == "newPassword"

    @pytest.mark.asyncio
    async def test_clear_sessions_keeps_current(self, auth_service, db_session, make_admin):
        """Test clearing sessions leaves the caller's own session."""
        admin = await make_admin(db_session)
        current = await auth_service.login(db_session, "admin", VALID_PASSWORD)
        await auth_service.login(db_session, "admin", VALID_PASSWORD)
        await auth_service.login(db_session, "admin", VALID_PASSWORD)

        await auth_service.update_password(
            db_session,
            admin.id,
            VALID_PASSWORD,
            OTHER_VALID_PASSWORD,
            OTHER_VALID_PASSWORD,
            clear_sessions=True,
            current_session_id=current.session.id,
        )

        remaining = await db_session.execute(select(AdminSession.token))
        assert remaining.scalars().all() == [current.session.token]

    @pytest.mark.asyncio
    async def test_confirm_password(self, auth_service, db_session, make_admin):
        admin = await make_admin(db_session)

        assert await auth_service.confirm_password(db_session, admin.id, VALID_PASSWORD) is True
        assert await auth_service.confirm_password(db_session, admin.id, OTHER_VALID_PASSWORD) is False
