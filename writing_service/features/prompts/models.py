"""SQLAlchemy models for the prompts feature."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from writing_service.core.database import DocumentBase


class Prompt(DocumentBase):
    """Reusable prompt template made of AI prompt steps."""

    __tablename__ = "prompts"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    client_id: Mapped[str] = mapped_column(String(255), default="")
    user_input_is_intention: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_prompt_steps: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<Prompt(id={self.id}, title={self.title!r})>"


class PromptRun(DocumentBase):
    """Record of prompt steps executed against a document.

    ``ai_steps`` holds the raw request/response pairs exchanged with the AI
    service, one entry per executed step.
    """

    __tablename__ = "prompt_runs"

    google_doc_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user: Mapped[UUID] = mapped_column(nullable=False, index=True)
    ai_prompt_steps: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    ai_steps: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<PromptRun(id={self.id}, google_doc_id={self.google_doc_id!r})>"
