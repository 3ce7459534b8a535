"""
Admin User Model.

Defines the local administrator account for the Plex Guard web console.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database.base import Base, TimestampMixin, UUIDPrimaryKey

if TYPE_CHECKING:
    from core.models.session import AdminSession


class AdminUser(Base, TimestampMixin):
    """
    Local administrator account for the web console.

    Attributes:
        id: UUID primary key.
        username: Unique login username.
        email: Optional unique email, also accepted as login name.
        password_hash: Bcrypt hashed password.
        avatar_url: Optional profile picture URL.
    """

    __tablename__ = "admin_users"

    id: Mapped[UUIDPrimaryKey]

    username: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="Unique login username",
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
        comment="Optional contact / login email",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password",
    )

    avatar_url: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Profile picture URL",
    )

    sessions: Mapped[list["AdminSession"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<AdminUser(id={self.id}, username={self.username})>"
