"""SQLAlchemy models for the documents feature."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from writing_service.core.database import DocumentBase


class DocService(str, Enum):
    """Editor a document lives in."""

    GOOGLE_DOCS = "GOOGLE_DOCS"
    MICROSOFT_WORD = "MICROSOFT_WORD"
    RAW_TEXT = "RAW_TEXT"


class GoogleDoc(DocumentBase):
    """A document registered by a user.

    ``google_doc_id`` is the editor's identifier, not the primary key. The
    pair (google_doc_id, user) identifies a registration.
    """

    __tablename__ = "google_docs"
    __table_args__ = (Index("ix_google_docs_doc_user", "google_doc_id", "user"),)

    google_doc_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Editor document identifier",
    )
    word_doc_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user: Mapped[UUID | None] = mapped_column(nullable=True, index=True, comment="Owner id")
    admin: Mapped[bool] = mapped_column(Boolean, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    title: Mapped[str] = mapped_column(String(500), default="")
    document_intention: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    current_day_intention: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    assignment_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    course_assignment_id: Mapped[UUID | None] = mapped_column(nullable=True)
    user_classroom_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    service: Mapped[str] = mapped_column(
        String(32),
        default=DocService.GOOGLE_DOCS.value,
        comment="GOOGLE_DOCS | MICROSOFT_WORD | RAW_TEXT",
    )

    def __repr__(self) -> str:
        return f"<GoogleDoc(id={self.id}, google_doc_id={self.google_doc_id!r})>"


class DocVersion(DocumentBase):
    """Snapshot of a document's text, with the chat log at that moment."""

    __tablename__ = "doc_versions"
    __table_args__ = (Index("ix_doc_versions_created_id", "created_at", "id"),)

    doc_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    plain_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    markdown_text: Mapped[str] = mapped_column(Text, default="")
    last_changed_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    session_intention: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    document_intention: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    day_intention: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    chat_log: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    activity: Mapped[str | None] = mapped_column(String(255), nullable=True)
    intent: Mapped[str | None] = mapped_column(Text, nullable=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    last_modifying_user: Mapped[str | None] = mapped_column(String(255), nullable=True)
    modified_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<DocVersion(id={self.id}, doc_id={self.doc_id!r})>"
