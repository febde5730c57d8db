"""SQLAlchemy models for the timelines feature."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from writing_service.core.database import DocumentBase


class DocTimeline(DocumentBase):
    """Points of interest in a document's history, as reviewed by one user.

    ``timeline_points`` is stored as JSON; each point embeds a snapshot of
    the version it describes. The pair (doc_id, user) identifies a timeline.
    """

    __tablename__ = "doc_timelines"
    __table_args__ = (UniqueConstraint("doc_id", "user", name="uq_doc_timelines_doc_user"),)

    doc_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Editor document identifier",
    )
    user: Mapped[UUID] = mapped_column(nullable=False, index=True)
    timeline_points: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<DocTimeline(doc_id={self.doc_id!r}, user={self.user})>"
