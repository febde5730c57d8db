"""Pydantic schemas for the documents feature.

Input schemas validate mutation arguments after Strawberry has converted
them to plain data; response schemas are built from ORM rows
(``from_attributes``) and handed to the GraphQL types.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from writing_service.features.documents.models import DocService


class Intention(BaseModel):
    """A stated writing intention."""

    description: str | None = None
    created_at: datetime | None = None


class ChatItem(BaseModel):
    """One message of the assistant chat attached to a version."""

    sender: str | None = None
    message: str | None = None
    display_type: str | None = None
    bullet_points: list[str] = Field(default_factory=list)


class DocVersionCreate(BaseModel):
    """Payload of ``submitGoogleDocVersion``."""

    doc_id: str = Field(..., min_length=1)
    plain_text: str
    markdown_text: str = ""
    last_changed_id: str | None = None
    session_id: str | None = None
    session_intention: Intention | None = None
    document_intention: Intention | None = None
    day_intention: Intention | None = None
    chat_log: list[ChatItem] = Field(default_factory=list)
    activity: str | None = None
    intent: str | None = None
    title: str | None = None
    last_modifying_user: str | None = None
    modified_time: datetime | None = None


class GoogleDocUpsert(BaseModel):
    """Payload of ``storeGoogleDoc``; (google_doc_id, user) is the key."""

    google_doc_id: str = Field(..., min_length=1)
    user: UUID
    word_doc_id: str | None = None
    title: str | None = None
    admin: bool | None = None
    archived: bool | None = None
    document_intention: Intention | None = None
    current_day_intention: Intention | None = None
    assignment_description: str | None = None
    service: DocService | None = None
    course_assignment_id: UUID | None = None


class GoogleDocResponse(BaseModel):
    """Stored document registration."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    google_doc_id: str
    word_doc_id: str | None = None
    user: UUID | None = None
    admin: bool = False
    archived: bool = False
    deleted: bool | None = None
    title: str = ""
    document_intention: dict[str, Any] | None = None
    current_day_intention: dict[str, Any] | None = None
    assignment_description: str | None = None
    course_assignment_id: UUID | None = None
    user_classroom_code: str | None = None
    service: str | None = None
    created_at: datetime
    updated_at: datetime


class DocVersionResponse(BaseModel):
    """Stored document version."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    doc_id: str
    plain_text: str
    markdown_text: str = ""
    last_changed_id: str | None = None
    session_id: str | None = None
    session_intention: dict[str, Any] | None = None
    document_intention: dict[str, Any] | None = None
    day_intention: dict[str, Any] | None = None
    chat_log: list[dict[str, Any]] = Field(default_factory=list)
    activity: str | None = None
    intent: str | None = None
    title: str | None = None
    last_modifying_user: str | None = None
    modified_time: datetime | None = None
    created_at: datetime
    updated_at: datetime
