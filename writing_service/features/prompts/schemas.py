"""Pydantic schemas for the prompts feature."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PromptRole(str, Enum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    USER = "user"


class PromptOutputDataType(str, Enum):
    JSON = "JSON"
    TEXT = "TEXT"


class PromptConfiguration(BaseModel):
    """A single prompt inside a step."""

    prompt_text: str
    include_essay: bool
    include_user_input: bool = False
    prompt_role: PromptRole | None = None


class AiPromptStep(BaseModel):
    """A step of a prompt template: prompts sent together to the AI service."""

    prompts: list[PromptConfiguration] = Field(default_factory=list)
    output_data_type: PromptOutputDataType = PromptOutputDataType.TEXT
    include_chat_log_context: bool = False
    custom_system_role: str | None = None


class AiStep(BaseModel):
    """Request/response pair recorded for one executed step."""

    ai_service_request_params: str
    ai_service_response: str


class PromptUpsert(BaseModel):
    """Payload of ``storePrompt``."""

    id: str | None = None
    title: str = Field(..., min_length=1)
    client_id: str = ""
    user_input_is_intention: bool = False
    ai_prompt_steps: list[AiPromptStep] = Field(default_factory=list)


class PromptRunCreate(BaseModel):
    """Payload of ``storePromptRun``."""

    google_doc_id: str = Field(..., min_length=1)
    user: UUID
    ai_prompt_steps: list[AiPromptStep] = Field(default_factory=list)
    ai_steps: list[AiStep] = Field(default_factory=list)


class PromptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    client_id: str = ""
    user_input_is_intention: bool = False
    ai_prompt_steps: list[dict[str, Any]] = Field(default_factory=list)
    deleted: bool | None = None
    created_at: datetime
    updated_at: datetime


class PromptRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    google_doc_id: str
    user: UUID
    ai_prompt_steps: list[dict[str, Any]] = Field(default_factory=list)
    ai_steps: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PromptsUpsert(BaseModel):
    """Payload of ``storePrompts``."""

    prompts: list[PromptUpsert] = Field(default_factory=list)
