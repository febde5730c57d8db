"""Declarative base and column mixins shared by every model.

Examples:
    Soft-deletable document with UUID key and timestamps:
    class GoogleDoc(Base, UUIDPKMixin, TimestampMixin, SoftDeleteFlagMixin):
        __tablename__ = "google_docs"
        title: Mapped[str] = mapped_column(String(500), default="")
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

# Consistent naming convention for database constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base with constraint naming and default table names.

    Models normally set ``__tablename__`` explicitly; the lowercase class
    name is only a fallback.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()


class UUIDPKMixin:
    """UUID v4 primary key, exposed to clients as ``_id``."""

    __allow_unmapped__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
        comment="UUID v4 primary key",
    )


class TimestampMixin:
    """Automatic ``created_at`` / ``updated_at`` tracking.

    Both columns are timezone aware and default to the current UTC time.
    ``updated_at`` is refreshed on every ORM update.
    """

    __allow_unmapped__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        index=True,
        comment="Record creation timestamp (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        onupdate=lambda: datetime.now(UTC),
        comment="Last update timestamp (UTC)",
    )


class SoftDeleteFlagMixin:
    """Boolean soft delete flag.

    A record is deleted only when ``deleted`` is true; NULL and false both
    mean live. Rows are never physically removed by the API.
    """

    __allow_unmapped__ = True

    deleted: Mapped[bool | None] = mapped_column(
        Boolean,
        nullable=True,
        default=False,
        comment="Soft delete flag",
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted is True


class DocumentBase(Base, UUIDPKMixin, TimestampMixin, SoftDeleteFlagMixin):
    """Abstract base for every stored document type."""

    __abstract__ = True


__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "DocumentBase",
    "SoftDeleteFlagMixin",
    "TimestampMixin",
    "UUIDPKMixin",
]
