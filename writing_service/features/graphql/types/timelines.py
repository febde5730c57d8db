"""GraphQL types for the timelines feature."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

import strawberry

from writing_service.features.documents.schemas import DocVersionCreate
from writing_service.features.graphql.types.base import MutationError
from writing_service.features.graphql.types.documents import (
    ChatItemType,
    GoogleDocVersionInput,
    IntentionType,
)
from writing_service.features.timelines.schemas import (
    DocTimelineResponse,
    GenerationStatus,
    TimelinePoint,
    TimelinePointKind,
)

if TYPE_CHECKING:
    from writing_service.features.timelines.models import DocTimeline

TimelinePointKindEnum = strawberry.enum(TimelinePointKind, name="TimelinePointKind")
GenerationStatusEnum = strawberry.enum(GenerationStatus, name="GenerationStatus")


@strawberry.type(description="Document version embedded in a timeline point")
class TimelineVersionType:
    doc_id: str
    plain_text: str
    markdown_text: str
    title: str | None
    intent: str | None
    session_intention: IntentionType | None
    document_intention: IntentionType | None
    day_intention: IntentionType | None
    chat_log: list[ChatItemType]
    last_modifying_user: str | None
    modified_time: datetime | None

    @classmethod
    def from_data(cls, data: DocVersionCreate) -> TimelineVersionType:
        def intention(value: Any) -> IntentionType | None:
            return IntentionType.from_data(value.model_dump()) if value else None

        return cls(
            doc_id=data.doc_id,
            plain_text=data.plain_text,
            markdown_text=data.markdown_text,
            title=data.title,
            intent=data.intent,
            session_intention=intention(data.session_intention),
            document_intention=intention(data.document_intention),
            day_intention=intention(data.day_intention),
            chat_log=[ChatItemType.from_data(item.model_dump()) for item in data.chat_log],
            last_modifying_user=data.last_modifying_user,
            modified_time=data.modified_time,
        )


@strawberry.type(name="TimelinePoint", description="A reviewed moment in a document's history")
class TimelinePointType:
    type: TimelinePointKindEnum  # type: ignore[valid-type]
    version_time: datetime | None
    version: TimelineVersionType | None
    intent: str
    change_summary: str
    change_summary_status: GenerationStatusEnum  # type: ignore[valid-type]
    user_input_summary: str
    reverse_outline: str
    reverse_outline_status: GenerationStatusEnum  # type: ignore[valid-type]
    related_feedback: str

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> TimelinePointType:
        point = TimelinePoint.model_validate(data)
        return cls(
            type=point.type,
            version_time=point.version_time,
            version=TimelineVersionType.from_data(point.version) if point.version else None,
            intent=point.intent,
            change_summary=point.change_summary,
            change_summary_status=point.change_summary_status,
            user_input_summary=point.user_input_summary,
            reverse_outline=point.reverse_outline,
            reverse_outline_status=point.reverse_outline_status,
            related_feedback=point.related_feedback,
        )


@strawberry.type(description="Timeline of a document as reviewed by one user")
class DocTimelineType:
    id: strawberry.ID
    doc_id: str
    user: strawberry.ID
    timeline_points: list[TimelinePointType]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, timeline: DocTimeline) -> DocTimelineType:
        data = DocTimelineResponse.model_validate(timeline)
        return cls(
            id=strawberry.ID(str(data.id)),
            doc_id=data.doc_id,
            user=strawberry.ID(str(data.user)),
            timeline_points=[TimelinePointType.from_data(point) for point in data.timeline_points],
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


@strawberry.input
class TimelinePointInput:
    type: TimelinePointKindEnum | None = None  # type: ignore[valid-type]
    version_time: datetime | None = None
    version: GoogleDocVersionInput | None = None
    intent: str | None = None
    change_summary: str | None = None
    change_summary_status: GenerationStatusEnum | None = None  # type: ignore[valid-type]
    user_input_summary: str | None = None
    reverse_outline: str | None = None
    reverse_outline_status: GenerationStatusEnum | None = None  # type: ignore[valid-type]
    related_feedback: str | None = None


@strawberry.input(description="Input for storing a document timeline")
class DocTimelineInput:
    doc_id: str
    user: strawberry.ID
    timeline_points: list[TimelinePointInput] | None = None


@strawberry.type(description="Document timeline stored successfully")
class DocTimelineSuccess:
    doc_timeline: DocTimelineType


DocTimelinePayload = Annotated[
    DocTimelineSuccess | MutationError,
    strawberry.union("DocTimelinePayload"),
]


__all__ = [
    "DocTimelineInput",
    "DocTimelinePayload",
    "DocTimelineSuccess",
    "DocTimelineType",
    "TimelinePointInput",
    "TimelinePointType",
    "TimelineVersionType",
]
