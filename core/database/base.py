"""
Database Base Model Module.

Defines the declarative base and common model mixins.
All models should inherit from this Base class.
"""

from datetime import datetime, timezone
from typing import Annotated
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# Custom type annotations for common column types
# SQLite has no native UUID type; ids are stored as canonical strings.
UUIDPrimaryKey = Annotated[
    str,
    mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    ),
]

CreatedAt = Annotated[
    datetime,
    mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    ),
]

UpdatedAt = Annotated[
    datetime,
    mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    ),
]


class Base(DeclarativeBase):
    """
    Declarative base class for all SQLAlchemy models.
    """
    pass


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp columns.

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
            ...
    """

    created_at: Mapped[CreatedAt]
    updated_at: Mapped[UpdatedAt]
