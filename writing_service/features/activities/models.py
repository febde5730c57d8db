"""SQLAlchemy models for the activities feature."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from writing_service.core.database import DocumentBase


class ActivityVisibility(str, Enum):
    """Who besides the author may see or edit a built activity."""

    PRIVATE = "PRIVATE"
    READ_ONLY = "READ_ONLY"
    EDITABLE = "EDITABLE"


class BuiltActivity(DocumentBase):
    """Activity assembled in the builder: named flows of typed steps.

    ``flows_list`` is stored as JSON; every step inside it has passed the
    step dispatch table in ``features.activities.steps``.
    """

    __tablename__ = "built_activities"

    title: Mapped[str] = mapped_column(String(500), default="")
    user: Mapped[UUID | None] = mapped_column(nullable=True, index=True, comment="Author id")
    visibility: Mapped[str] = mapped_column(
        String(16),
        default=ActivityVisibility.PRIVATE.value,
        index=True,
    )
    activity_type: Mapped[str] = mapped_column(String(64), default="builder")
    description: Mapped[str] = mapped_column(Text, default="")
    display_icon: Mapped[str] = mapped_column(String(255), default="")
    disabled: Mapped[bool] = mapped_column(Boolean, default=False)
    new_doc_recommend: Mapped[bool] = mapped_column(Boolean, default=False)
    flows_list: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<BuiltActivity(id={self.id}, title={self.title!r})>"


class UserActivityState(DocumentBase):
    """Opaque per-user progress through an activity on a document."""

    __tablename__ = "user_activity_states"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "activity_id",
            "google_doc_id",
            name="uq_user_activity_states_user_activity_doc",
        ),
    )

    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    activity_id: Mapped[UUID] = mapped_column(nullable=False)
    google_doc_id: Mapped[str] = mapped_column(String(255), nullable=False)
    # Declarative models reserve the ``metadata`` attribute
    state_metadata: Mapped[str] = mapped_column("metadata", Text, default="")

    def __repr__(self) -> str:
        return (
            f"<UserActivityState(user_id={self.user_id}, activity_id={self.activity_id}, "
            f"google_doc_id={self.google_doc_id!r})>"
        )


class BuiltActivityVersion(DocumentBase):
    """Saved snapshot of a built activity.

    ``activity`` holds the activity as submitted, so versions survive later
    edits or deletion of the activity itself.
    """

    __tablename__ = "built_activity_versions"

    activity: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    version_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<BuiltActivityVersion(id={self.id}, version_time={self.version_time})>"
