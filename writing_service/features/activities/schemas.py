"""Pydantic schemas for the activities feature."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from writing_service.features.activities.models import ActivityVisibility
from writing_service.features.activities.steps import ActivityFlow


class BuiltActivityUpsert(BaseModel):
    """Payload of ``addOrUpdateBuiltActivity`` and ``storeBuiltActivityVersion``.

    ``id`` is kept as the raw client string; an absent or malformed id means
    a new activity.
    """

    id: str | None = None
    title: str = ""
    user: UUID | None = None
    visibility: ActivityVisibility = ActivityVisibility.PRIVATE
    activity_type: str = "builder"
    description: str = ""
    display_icon: str = ""
    disabled: bool = False
    new_doc_recommend: bool = False
    flows_list: list[ActivityFlow] = Field(default_factory=list)


class UserActivityStateUpsert(BaseModel):
    """Payload of ``updateUserActivityState``."""

    user_id: UUID
    activity_id: UUID
    google_doc_id: str = Field(..., min_length=1)
    metadata: str = ""


class BuiltActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str = ""
    user: UUID | None = None
    visibility: ActivityVisibility = ActivityVisibility.PRIVATE
    activity_type: str = "builder"
    description: str = ""
    display_icon: str = ""
    disabled: bool = False
    new_doc_recommend: bool = False
    flows_list: list[ActivityFlow] = Field(default_factory=list)
    deleted: bool | None = None
    created_at: datetime
    updated_at: datetime


class UserActivityStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    activity_id: UUID
    google_doc_id: str
    metadata: str = Field(default="", validation_alias="state_metadata")
    created_at: datetime
    updated_at: datetime


class BuiltActivityVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    activity: BuiltActivityUpsert
    version_time: datetime
    created_at: datetime
