"""GraphQL types for the documents feature.

Output types are built from ORM rows through the pydantic response schemas;
input types are converted to plain data and validated by the create/upsert
schemas before anything is written.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

import strawberry

from writing_service.features.documents.models import DocService
from writing_service.features.documents.schemas import (
    ChatItem,
    DocVersionResponse,
    GoogleDocResponse,
    Intention,
)
from writing_service.features.graphql.types.base import MutationError

if TYPE_CHECKING:
    from writing_service.features.documents.models import DocVersion, GoogleDoc

DocServiceEnum = strawberry.enum(DocService, name="DocService", description="Editor a document lives in")


# ============================================================================
# Output Types
# ============================================================================


@strawberry.type(description="A stated writing intention")
class IntentionType:
    description: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_data(cls, data: dict[str, Any] | None) -> IntentionType | None:
        if data is None:
            return None
        intention = Intention.model_validate(data)
        return cls(description=intention.description, created_at=intention.created_at)


@strawberry.type(description="One message of the assistant chat")
class ChatItemType:
    sender: str | None = None
    message: str | None = None
    display_type: str | None = None
    bullet_points: list[str] = strawberry.field(default_factory=list)

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> ChatItemType:
        item = ChatItem.model_validate(data)
        return cls(
            sender=item.sender,
            message=item.message,
            display_type=item.display_type,
            bullet_points=list(item.bullet_points),
        )


@strawberry.type(description="A document registered by a user")
class GoogleDocType:
    id: strawberry.ID
    google_doc_id: str
    word_doc_id: str | None
    user: strawberry.ID | None
    admin: bool
    archived: bool
    deleted: bool | None
    title: str
    document_intention: IntentionType | None
    current_day_intention: IntentionType | None
    assignment_description: str | None
    course_assignment_id: strawberry.ID | None
    user_classroom_code: str | None
    service: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, doc: GoogleDoc) -> GoogleDocType:
        data = GoogleDocResponse.model_validate(doc)
        return cls(
            id=strawberry.ID(str(data.id)),
            google_doc_id=data.google_doc_id,
            word_doc_id=data.word_doc_id,
            user=strawberry.ID(str(data.user)) if data.user else None,
            admin=data.admin,
            archived=data.archived,
            deleted=data.deleted,
            title=data.title,
            document_intention=IntentionType.from_data(data.document_intention),
            current_day_intention=IntentionType.from_data(data.current_day_intention),
            assignment_description=data.assignment_description,
            course_assignment_id=(
                strawberry.ID(str(data.course_assignment_id)) if data.course_assignment_id else None
            ),
            user_classroom_code=data.user_classroom_code,
            service=data.service,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


@strawberry.type(description="Snapshot of a document's text and chat log")
class DocVersionType:
    id: strawberry.ID
    doc_id: str
    plain_text: str
    markdown_text: str
    last_changed_id: str | None
    session_id: str | None
    session_intention: IntentionType | None
    document_intention: IntentionType | None
    day_intention: IntentionType | None
    chat_log: list[ChatItemType]
    activity: str | None
    intent: str | None
    title: str | None
    last_modifying_user: str | None
    modified_time: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, version: DocVersion) -> DocVersionType:
        data = DocVersionResponse.model_validate(version)
        return cls(
            id=strawberry.ID(str(data.id)),
            doc_id=data.doc_id,
            plain_text=data.plain_text,
            markdown_text=data.markdown_text,
            last_changed_id=data.last_changed_id,
            session_id=data.session_id,
            session_intention=IntentionType.from_data(data.session_intention),
            document_intention=IntentionType.from_data(data.document_intention),
            day_intention=IntentionType.from_data(data.day_intention),
            chat_log=[ChatItemType.from_data(item) for item in data.chat_log],
            activity=data.activity,
            intent=data.intent,
            title=data.title,
            last_modifying_user=data.last_modifying_user,
            modified_time=data.modified_time,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


# ============================================================================
# Input Types
# ============================================================================


@strawberry.input(description="A stated writing intention")
class IntentionInput:
    description: str | None = None
    created_at: datetime | None = None


@strawberry.input(description="One message of the assistant chat")
class ChatItemInput:
    sender: str | None = None
    message: str | None = None
    display_type: str | None = None
    bullet_points: list[str] | None = None


@strawberry.input(description="Input for submitting a document version")
class GoogleDocVersionInput:
    doc_id: str
    plain_text: str
    markdown_text: str | None = None
    last_changed_id: str | None = None
    session_id: str | None = None
    session_intention: IntentionInput | None = None
    document_intention: IntentionInput | None = None
    day_intention: IntentionInput | None = None
    chat_log: list[ChatItemInput] | None = None
    activity: str | None = None
    intent: str | None = None
    title: str | None = None
    last_modifying_user: str | None = None
    modified_time: datetime | None = None


@strawberry.input(description="Input for registering or updating a document")
class GoogleDocInput:
    google_doc_id: str
    user: strawberry.ID
    word_doc_id: str | None = None
    title: str | None = None
    admin: bool | None = None
    archived: bool | None = None
    document_intention: IntentionInput | None = None
    current_day_intention: IntentionInput | None = None
    assignment_description: str | None = None
    service: DocServiceEnum | None = None  # type: ignore[valid-type]
    course_assignment_id: strawberry.ID | None = None


# ============================================================================
# Union Types for Responses
# ============================================================================


@strawberry.type(description="Document stored successfully")
class GoogleDocSuccess:
    google_doc: GoogleDocType


@strawberry.type(description="Document version stored successfully")
class DocVersionSuccess:
    doc_version: DocVersionType


GoogleDocPayload = Annotated[
    GoogleDocSuccess | MutationError,
    strawberry.union("GoogleDocPayload"),
]
DocVersionPayload = Annotated[
    DocVersionSuccess | MutationError,
    strawberry.union("DocVersionPayload"),
]


__all__ = [
    "ChatItemInput",
    "ChatItemType",
    "DocServiceEnum",
    "DocVersionPayload",
    "DocVersionSuccess",
    "DocVersionType",
    "GoogleDocInput",
    "GoogleDocPayload",
    "GoogleDocSuccess",
    "GoogleDocType",
    "GoogleDocVersionInput",
    "IntentionInput",
    "IntentionType",
]
