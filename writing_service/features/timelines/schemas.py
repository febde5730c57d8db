"""Pydantic schemas for the timelines feature."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from writing_service.features.documents.schemas import DocVersionCreate


class TimelinePointKind(str, Enum):
    """Why a version was picked as a point on the timeline."""

    START = "START"
    NEW_ACTIVITY = "NEW_ACTIVITY"
    TIME_DIFFERENCE = "TIME_DIFFERENCE"
    MOST_RECENT = "MOST_RECENT"
    NONE = ""


class GenerationStatus(str, Enum):
    """Progress of an AI-generated summary on a timeline point."""

    NONE = "NONE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class TimelinePoint(BaseModel):
    type: TimelinePointKind = TimelinePointKind.NONE
    version_time: datetime | None = None
    version: DocVersionCreate | None = None
    intent: str = ""
    change_summary: str = ""
    change_summary_status: GenerationStatus = GenerationStatus.NONE
    user_input_summary: str = ""
    reverse_outline: str = ""
    reverse_outline_status: GenerationStatus = GenerationStatus.NONE
    related_feedback: str = ""


class DocTimelineUpsert(BaseModel):
    """Payload of ``storeDocTimeline``; (doc_id, user) is the key."""

    doc_id: str = Field(..., min_length=1)
    user: UUID
    timeline_points: list[TimelinePoint] = Field(default_factory=list)


class DocTimelineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    doc_id: str
    user: UUID
    timeline_points: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
