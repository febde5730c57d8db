"""GraphQL types for the prompts feature."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

import strawberry

from writing_service.features.graphql.types.base import MutationError
from writing_service.features.prompts.schemas import (
    AiPromptStep,
    AiStep,
    PromptOutputDataType,
    PromptResponse,
    PromptRole,
    PromptRunResponse,
)

if TYPE_CHECKING:
    from writing_service.features.prompts.models import Prompt, PromptRun

PromptRoleEnum = strawberry.enum(PromptRole, name="PromptRole")
PromptOutputDataTypeEnum = strawberry.enum(PromptOutputDataType, name="PromptOutputDataType")


@strawberry.type
class PromptConfigurationType:
    prompt_text: str
    include_essay: bool
    include_user_input: bool
    prompt_role: PromptRoleEnum | None  # type: ignore[valid-type]


@strawberry.type(description="Prompts sent together to the AI service")
class AiPromptStepType:
    prompts: list[PromptConfigurationType]
    output_data_type: PromptOutputDataTypeEnum  # type: ignore[valid-type]
    include_chat_log_context: bool
    custom_system_role: str | None

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> AiPromptStepType:
        step = AiPromptStep.model_validate(data)
        return cls(
            prompts=[
                PromptConfigurationType(
                    prompt_text=prompt.prompt_text,
                    include_essay=prompt.include_essay,
                    include_user_input=prompt.include_user_input,
                    prompt_role=prompt.prompt_role,
                )
                for prompt in step.prompts
            ],
            output_data_type=step.output_data_type,
            include_chat_log_context=step.include_chat_log_context,
            custom_system_role=step.custom_system_role,
        )


@strawberry.type(description="Request/response pair of one executed step")
class AiStepType:
    ai_service_request_params: str
    ai_service_response: str

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> AiStepType:
        step = AiStep.model_validate(data)
        return cls(
            ai_service_request_params=step.ai_service_request_params,
            ai_service_response=step.ai_service_response,
        )


@strawberry.type(description="Reusable prompt template")
class PromptType:
    id: strawberry.ID
    title: str
    client_id: str
    user_input_is_intention: bool
    ai_prompt_steps: list[AiPromptStepType]
    deleted: bool | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, prompt: Prompt) -> PromptType:
        data = PromptResponse.model_validate(prompt)
        return cls(
            id=strawberry.ID(str(data.id)),
            title=data.title,
            client_id=data.client_id,
            user_input_is_intention=data.user_input_is_intention,
            ai_prompt_steps=[AiPromptStepType.from_data(step) for step in data.ai_prompt_steps],
            deleted=data.deleted,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


@strawberry.type(description="Prompt steps executed against a document")
class PromptRunType:
    id: strawberry.ID
    google_doc_id: str
    user: strawberry.ID
    ai_prompt_steps: list[AiPromptStepType]
    ai_steps: list[AiStepType]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, run: PromptRun) -> PromptRunType:
        data = PromptRunResponse.model_validate(run)
        return cls(
            id=strawberry.ID(str(data.id)),
            google_doc_id=data.google_doc_id,
            user=strawberry.ID(str(data.user)),
            ai_prompt_steps=[AiPromptStepType.from_data(step) for step in data.ai_prompt_steps],
            ai_steps=[AiStepType.from_data(step) for step in data.ai_steps],
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


@strawberry.input
class PromptConfigurationInput:
    prompt_text: str
    include_essay: bool
    include_user_input: bool | None = None
    prompt_role: PromptRoleEnum | None = None  # type: ignore[valid-type]


@strawberry.input
class AiPromptStepInput:
    prompts: list[PromptConfigurationInput]
    output_data_type: PromptOutputDataTypeEnum | None = None  # type: ignore[valid-type]
    include_chat_log_context: bool | None = None
    custom_system_role: str | None = None


@strawberry.input
class AiStepInput:
    ai_service_request_params: str
    ai_service_response: str


@strawberry.input(description="Input for storing a prompt template")
class PromptInput:
    title: str
    id: strawberry.ID | None = None
    client_id: str | None = None
    user_input_is_intention: bool | None = None
    ai_prompt_steps: list[AiPromptStepInput] | None = None


@strawberry.type(description="Prompt stored successfully")
class PromptSuccess:
    prompt: PromptType


@strawberry.type(description="Prompts stored successfully")
class PromptsSuccess:
    prompts: list[PromptType]


@strawberry.type(description="Prompt run stored successfully")
class PromptRunSuccess:
    prompt_run: PromptRunType


PromptPayload = Annotated[PromptSuccess | MutationError, strawberry.union("PromptPayload")]
PromptsPayload = Annotated[PromptsSuccess | MutationError, strawberry.union("PromptsPayload")]
PromptRunPayload = Annotated[
    PromptRunSuccess | MutationError,
    strawberry.union("PromptRunPayload"),
]


__all__ = [
    "AiPromptStepInput",
    "AiPromptStepType",
    "AiStepInput",
    "AiStepType",
    "PromptConfigurationInput",
    "PromptConfigurationType",
    "PromptInput",
    "PromptPayload",
    "PromptRunPayload",
    "PromptRunSuccess",
    "PromptRunType",
    "PromptSuccess",
    "PromptType",
    "PromptsPayload",
    "PromptsSuccess",
]
