"""
Admin Session Model.

Server-side login sessions referenced by the ``session_token`` cookie.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database.base import Base, CreatedAt, UUIDPrimaryKey, utcnow

if TYPE_CHECKING:
    from core.models.admin_user import AdminUser


class AdminSession(Base):
    """
    Login session for an admin user.

    Attributes:
        id: UUID primary key.
        token: Random hex token stored in the session cookie.
        user_id: Owning admin user.
        expires_at: Absolute expiry time.
        last_activity_at: Refreshed on every validated request.
    """

    __tablename__ = "sessions"

    id: Mapped[UUIDPrimaryKey]

    token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    created_at: Mapped[CreatedAt]

    user: Mapped["AdminUser"] = relationship(back_populates="sessions", lazy="joined")

    def __repr__(self) -> str:
        return f"<AdminSession(id={self.id}, user_id={self.user_id})>"
