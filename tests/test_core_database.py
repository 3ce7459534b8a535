"""
Unit Tests for core.database layer.

Tests database engine, session management, and base models.
"""

import pytest
from unittest.mock import MagicMock, patch, AsyncMock
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool


class TestDatabaseEngine:
    """Tests for database engine management."""

    @pytest.fixture(autouse=True)
    def reset_engine(self):
        """Reset global engine before each test."""
        import core.database.engine as engine_module
        engine_module._engine = None
        with patch("core.database.engine._enable_sqlite_foreign_keys"):
            yield
        engine_module._engine = None

    @patch('core.database.engine.create_async_engine')
    def test_get_engine_creates_singleton(self, mock_create_engine, mock_env_vars):
        """Test get_engine() creates a singleton engine instance."""
        from core.database.engine import get_engine

        mock_create_engine.return_value = MagicMock(spec=AsyncEngine)

        engine1 = get_engine()
        engine2 = get_engine()

        assert engine1 is engine2
        assert mock_create_engine.call_count == 1

    @patch('core.database.engine.create_async_engine')
    def test_get_engine_uses_config_database_url(self, mock_create_engine, mock_env_vars, monkeypatch):
        """Test engine uses DATABASE_URL from config."""
        from core.database.engine import get_engine

        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:////srv/plex-guard.db")
        mock_create_engine.return_value = MagicMock(spec=AsyncEngine)

        get_engine()

        args, kwargs = mock_create_engine.call_args
        assert args[0] == "sqlite+aiosqlite:////srv/plex-guard.db"
        assert kwargs["connect_args"] == {"check_same_thread": False}
        assert "poolclass" not in kwargs

    @patch('core.database.engine.create_async_engine')
    def test_in_memory_url_uses_static_pool(self, mock_create_engine):
        """Test in-memory SQLite shares a single connection."""
        from core.database.engine import build_engine

        mock_create_engine.return_value = MagicMock(spec=AsyncEngine)

        build_engine("sqlite+aiosqlite://")

        assert mock_create_engine.call_args.kwargs["poolclass"] is StaticPool

    def test_sqlite_url_for_path(self, tmp_path):
        from core.database.engine import sqlite_url_for_path

        url = sqlite_url_for_path(tmp_path / "plex-guard.db")

        assert url == f"sqlite+aiosqlite:///{(tmp_path / 'plex-guard.db').resolve()}"

    @pytest.mark.asyncio
    @patch('core.database.engine.create_async_engine')
    async def test_close_engine_disposes_connection(self, mock_create_engine, mock_env_vars):
        """Test close_engine() properly disposes the engine."""
        from core.database.engine import get_engine, close_engine
        import core.database.engine as engine_module

        mock_engine = AsyncMock(spec=AsyncEngine)
        mock_create_engine.return_value = mock_engine

        get_engine()
        assert engine_module._engine is not None

        await close_engine()

        mock_engine.dispose.assert_called_once()
        assert engine_module._engine is None


class TestSessionManagement:
    """Tests for database session management."""

    @pytest.fixture(autouse=True)
    def reset_session_factory(self):
        """Reset global session factory before each test."""
        import core.database.session as session_module
        session_module._async_session_factory = None
        yield
        session_module._async_session_factory = None

    @patch('core.database.session.get_engine')
    def test_get_session_factory_creates_singleton(self, mock_get_engine, mock_env_vars):
        """Test get_session_factory() creates a singleton factory."""
        from core.database.session import get_session_factory

        mock_get_engine.return_value = MagicMock(spec=AsyncEngine)

        factory1 = get_session_factory()
        factory2 = get_session_factory()

        assert factory1 is factory2
        assert isinstance(factory1, async_sessionmaker)

    @pytest.mark.asyncio
    @patch('core.database.session.get_session_factory')
    async def test_get_standalone_session_context_manager(self, mock_get_factory, mock_env_vars):
        """Test get_standalone_session() works as context manager."""
        from core.database.session import get_standalone_session

        mock_session = AsyncMock(spec=AsyncSession)
        mock_factory = MagicMock(spec=async_sessionmaker)
        mock_factory.return_value.__aenter__.return_value = mock_session
        mock_factory.return_value.__aexit__.return_value = None
        mock_get_factory.return_value = mock_factory

        async with get_standalone_session() as session:
            assert session is mock_session

        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_standalone_session_rolls_back_on_error(self, db_engine):
        """Test work inside a failing block is not persisted."""
        from core.database.session import get_standalone_session
        from core.models import AdminUser
        from sqlalchemy import func, select

        with pytest.raises(RuntimeError):
            async with get_standalone_session(db_engine) as session:
                session.add(AdminUser(username="temp", password_hash="x"))
                await session.flush()
                raise RuntimeError("abort")

        async with get_standalone_session(db_engine) as session:
            result = await session.execute(select(func.count()).select_from(AdminUser))
            assert result.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_foreign_keys_enforced(self, db_engine):
        """Test the FK pragma is on for every connection."""
        async with db_engine.connect() as conn:
            result = await conn.execute(text("PRAGMA foreign_keys"))
            assert result.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_init_database_creates_tables(self, db_engine):
        async with db_engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        assert "admin_users" in tables
        assert "sessions" in tables


class TestBaseModels:
    """Tests for database base models and mixins."""

    def test_base_class_exists(self):
        """Test Base declarative class exists."""
        from core.database.base import Base
        from sqlalchemy.orm import DeclarativeBase

        assert issubclass(Base, DeclarativeBase)

    def test_timestamp_mixin_fields(self):
        """Test TimestampMixin adds created_at and updated_at."""
        from core.database.base import TimestampMixin
        from sqlalchemy import String
        from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

        class ScratchBase(DeclarativeBase):
            pass

        class Timestamped(ScratchBase, TimestampMixin):
            __tablename__ = "test_timestamp"
            id: Mapped[str] = mapped_column(String, primary_key=True)

        assert hasattr(Timestamped, 'created_at')
        assert hasattr(Timestamped, 'updated_at')

    def test_uuid_primary_key_annotation(self):
        """Test UUIDPrimaryKey generates string UUID ids."""
        from core.database.base import UUIDPrimaryKey
        from sqlalchemy.orm import DeclarativeBase, Mapped

        class ScratchBase(DeclarativeBase):
            pass

        class WithUuid(ScratchBase):
            __tablename__ = "test_uuid"
            id: Mapped[UUIDPrimaryKey]

        column = WithUuid.__table__.columns['id']
        assert column.primary_key
        assert len(column.default.arg(None)) == 36
