"""
Pytest Configuration and Shared Fixtures.

Provides common test fixtures: mock environment, configuration and an
in-memory SQLite admin store.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


# bcrypt cost used in tests; production default is 12
TEST_BCRYPT_ROUNDS = 4

VALID_PASSWORD = "Abcdef123456!"
OTHER_VALID_PASSWORD = "Zyxwvu987654#"


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    env_vars = {
        "SERVER_HOST": "127.0.0.1",
        "SERVER_PORT": "3001",
        "BASE_URL": "https://guard.example.com",
        "APP_DEBUG": "true",
        "APP_LOG_LEVEL": "DEBUG",
        "DATABASE_URL": "sqlite+aiosqlite://",
        "BCRYPT_ROUNDS": str(TEST_BCRYPT_ROUNDS),
        "SESSION_EXPIRE_DAYS": "7",
        "COOKIE_SECURE": "false",
        "BACKEND_URL": "http://upstream.test:3001",
        "PROXY_TIMEOUT_SECONDS": "5",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture
def config_loader(mock_env_vars):
    """Create a ConfigLoader instance with mock environment."""
    from core.app_context import ConfigLoader

    loader = ConfigLoader()
    loader.load()
    return loader


@pytest.fixture
def app_context(config_loader):
    """Create an AppContext instance with mock environment."""
    from core.app_context import AppContext

    return AppContext(config_loader)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_engine() -> AsyncEngine:
    """Fresh in-memory SQLite engine with the schema created."""
    from core.database import build_engine, init_database

    engine = build_engine("sqlite+aiosqlite://")
    await init_database(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncSession:
    """Session bound to the in-memory engine."""
    from core.database import make_session_factory

    factory = make_session_factory(db_engine)
    async with factory() as session:
        yield session


@pytest.fixture
def make_admin():
    """Factory fixture inserting an admin user with a known password."""
    from core.models import AdminUser
    from core.security.passwords import hash_password

    async def _make_admin(
        session: AsyncSession,
        username: str = "admin",
        password: str = VALID_PASSWORD,
        email: str | None = "admin@plexguard.io",
    ) -> AdminUser:
        admin = AdminUser(
            username=username,
            email=email,
            password_hash=hash_password(password, TEST_BCRYPT_ROUNDS),
        )
        session.add(admin)
        await session.commit()
        return admin

    return _make_admin
