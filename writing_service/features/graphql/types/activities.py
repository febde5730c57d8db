"""GraphQL types for the activities feature.

Each step kind has one pydantic model (``features.activities.steps``) and one
Strawberry type here, keyed by ``StepKind`` in ``STEP_TYPES``. Steps are
exposed as the ``ActivityStep`` union and resolved by concrete type.

GraphQL has no input unions, so ``ActivityStepInput`` is flat: ``stepType``
selects the variant and only that variant's fields are read.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

import strawberry

from writing_service.features.activities.models import ActivityVisibility
from writing_service.features.activities.schemas import (
    BuiltActivityResponse,
    BuiltActivityUpsert,
    BuiltActivityVersionResponse,
    UserActivityStateResponse,
)
from writing_service.features.activities.steps import (
    ActivityFlow,
    ActivityStep,
    ConditionalStep,
    PromptStep,
    RequestUserInputStep,
    StepKind,
    SystemMessageStep,
)
from writing_service.features.graphql.types.base import MutationError

if TYPE_CHECKING:
    from writing_service.features.activities.models import (
        BuiltActivity,
        BuiltActivityVersion,
        UserActivityState,
    )

ActivityVisibilityEnum = strawberry.enum(ActivityVisibility, name="ActivityVisibility")
StepKindEnum = strawberry.enum(StepKind, name="StepType")


# ============================================================================
# Step Types
# ============================================================================


@strawberry.interface(description="Fields shared by every activity step")
class ActivityStepInterface:
    step_id: str
    step_type: StepKindEnum  # type: ignore[valid-type]
    jump_to_step_id: str | None
    set_student_activity_complete: bool


@strawberry.type(name="SystemMessageStep")
class SystemMessageStepType(ActivityStepInterface):
    message: str

    @classmethod
    def from_step(cls, step: SystemMessageStep) -> SystemMessageStepType:
        return cls(
            step_id=step.step_id,
            step_type=step.step_type,
            jump_to_step_id=step.jump_to_step_id,
            set_student_activity_complete=step.set_student_activity_complete,
            message=step.message,
        )


@strawberry.type(name="PredefinedResponse")
class PredefinedResponseType:
    client_id: str
    message: str
    is_array: bool
    jump_to_step_id: str | None
    response_weight: str


@strawberry.type(name="RequestUserInputStep")
class RequestUserInputStepType(ActivityStepInterface):
    message: str
    save_as_intention: bool
    save_response_variable_name: str | None
    disable_free_input: bool
    predefined_responses: list[PredefinedResponseType]

    @classmethod
    def from_step(cls, step: RequestUserInputStep) -> RequestUserInputStepType:
        return cls(
            step_id=step.step_id,
            step_type=step.step_type,
            jump_to_step_id=step.jump_to_step_id,
            set_student_activity_complete=step.set_student_activity_complete,
            message=step.message,
            save_as_intention=step.save_as_intention,
            save_response_variable_name=step.save_response_variable_name,
            disable_free_input=step.disable_free_input,
            predefined_responses=[
                PredefinedResponseType(
                    client_id=response.client_id,
                    message=response.message,
                    is_array=response.is_array,
                    jump_to_step_id=response.jump_to_step_id,
                    response_weight=response.response_weight,
                )
                for response in step.predefined_responses
            ],
        )


@strawberry.type(name="PromptStep")
class PromptStepType(ActivityStepInterface):
    prompt_text: str
    response_format: str | None
    include_chat_log_context: bool
    include_essay: bool
    output_data_type: str
    json_response_data: str | None
    custom_system_role: str | None
    web_search: bool
    edit_doc: bool

    @classmethod
    def from_step(cls, step: PromptStep) -> PromptStepType:
        return cls(
            step_id=step.step_id,
            step_type=step.step_type,
            jump_to_step_id=step.jump_to_step_id,
            set_student_activity_complete=step.set_student_activity_complete,
            prompt_text=step.prompt_text,
            response_format=step.response_format,
            include_chat_log_context=step.include_chat_log_context,
            include_essay=step.include_essay,
            output_data_type=step.output_data_type,
            json_response_data=step.json_response_data,
            custom_system_role=step.custom_system_role,
            web_search=step.web_search,
            edit_doc=step.edit_doc,
        )


@strawberry.type(name="LogicStepConditional")
class LogicStepConditionalType:
    state_data_key: str
    checking: str
    operation: str
    expected_value: str
    target_step_id: str


@strawberry.type(name="ConditionalStep")
class ConditionalStepType(ActivityStepInterface):
    conditionals: list[LogicStepConditionalType]

    @classmethod
    def from_step(cls, step: ConditionalStep) -> ConditionalStepType:
        return cls(
            step_id=step.step_id,
            step_type=step.step_type,
            jump_to_step_id=step.jump_to_step_id,
            set_student_activity_complete=step.set_student_activity_complete,
            conditionals=[
                LogicStepConditionalType(
                    state_data_key=conditional.state_data_key,
                    checking=conditional.checking,
                    operation=conditional.operation,
                    expected_value=conditional.expected_value,
                    target_step_id=conditional.target_step_id,
                )
                for conditional in step.conditionals
            ],
        )


ActivityStepUnion = Annotated[
    SystemMessageStepType | RequestUserInputStepType | PromptStepType | ConditionalStepType,
    strawberry.union("ActivityStep"),
]

STEP_TYPES: dict[StepKind, type] = {
    StepKind.SYSTEM_MESSAGE: SystemMessageStepType,
    StepKind.REQUEST_USER_INPUT: RequestUserInputStepType,
    StepKind.PROMPT: PromptStepType,
    StepKind.CONDITIONAL: ConditionalStepType,
}


def step_to_graphql(step: ActivityStep) -> ActivityStepUnion:
    """Convert a validated step model into its GraphQL type."""
    return STEP_TYPES[step.step_type].from_step(step)


# ============================================================================
# Activity Types
# ============================================================================


@strawberry.type(name="ActivityFlow", description="Named sequence of steps")
class ActivityFlowType:
    client_id: str
    name: str
    steps: list[ActivityStepUnion]

    @classmethod
    def from_flow(cls, flow: ActivityFlow) -> ActivityFlowType:
        return cls(
            client_id=flow.client_id,
            name=flow.name,
            steps=[step_to_graphql(step) for step in flow.steps],
        )


@strawberry.type(description="Activity assembled in the builder")
class BuiltActivityType:
    id: strawberry.ID
    title: str
    user: strawberry.ID | None
    visibility: ActivityVisibilityEnum  # type: ignore[valid-type]
    activity_type: str
    description: str
    display_icon: str
    disabled: bool
    new_doc_recommend: bool
    flows_list: list[ActivityFlowType]
    deleted: bool | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, activity: BuiltActivity) -> BuiltActivityType:
        data = BuiltActivityResponse.model_validate(activity)
        return cls(
            id=strawberry.ID(str(data.id)),
            title=data.title,
            user=strawberry.ID(str(data.user)) if data.user else None,
            visibility=data.visibility,
            activity_type=data.activity_type,
            description=data.description,
            display_icon=data.display_icon,
            disabled=data.disabled,
            new_doc_recommend=data.new_doc_recommend,
            flows_list=[ActivityFlowType.from_flow(flow) for flow in data.flows_list],
            deleted=data.deleted,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


@strawberry.type(description="Built activity as it was when a version was saved")
class BuiltActivitySnapshotType:
    id: strawberry.ID | None
    title: str
    user: strawberry.ID | None
    visibility: ActivityVisibilityEnum  # type: ignore[valid-type]
    activity_type: str
    description: str
    display_icon: str
    disabled: bool
    new_doc_recommend: bool
    flows_list: list[ActivityFlowType]

    @classmethod
    def from_data(cls, data: BuiltActivityUpsert) -> BuiltActivitySnapshotType:
        return cls(
            id=strawberry.ID(data.id) if data.id else None,
            title=data.title,
            user=strawberry.ID(str(data.user)) if data.user else None,
            visibility=data.visibility,
            activity_type=data.activity_type,
            description=data.description,
            display_icon=data.display_icon,
            disabled=data.disabled,
            new_doc_recommend=data.new_doc_recommend,
            flows_list=[ActivityFlowType.from_flow(flow) for flow in data.flows_list],
        )


@strawberry.type(description="Saved version of a built activity")
class BuiltActivityVersionType:
    id: strawberry.ID
    activity: BuiltActivitySnapshotType
    version_time: datetime

    @classmethod
    def from_model(cls, version: BuiltActivityVersion) -> BuiltActivityVersionType:
        data = BuiltActivityVersionResponse.model_validate(version)
        return cls(
            id=strawberry.ID(str(data.id)),
            activity=BuiltActivitySnapshotType.from_data(data.activity),
            version_time=data.version_time,
        )


@strawberry.type(description="Progress of a user through an activity on a document")
class UserActivityStateType:
    id: strawberry.ID
    user_id: strawberry.ID
    activity_id: strawberry.ID
    google_doc_id: str
    metadata: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, state: UserActivityState) -> UserActivityStateType:
        data = UserActivityStateResponse.model_validate(state)
        return cls(
            id=strawberry.ID(str(data.id)),
            user_id=strawberry.ID(str(data.user_id)),
            activity_id=strawberry.ID(str(data.activity_id)),
            google_doc_id=data.google_doc_id,
            metadata=data.metadata,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


# ============================================================================
# Input Types
# ============================================================================


@strawberry.input
class PredefinedResponseInput:
    client_id: str | None = None
    message: str | None = None
    is_array: bool | None = None
    jump_to_step_id: str | None = None
    response_weight: str | None = None


@strawberry.input
class LogicStepConditionalInput:
    state_data_key: str | None = None
    checking: str | None = None
    operation: str | None = None
    expected_value: str | None = None
    target_step_id: str | None = None


@strawberry.input(description="A step of any kind; stepType selects which fields apply")
class ActivityStepInput:
    step_id: str
    step_type: str
    jump_to_step_id: str | None = None
    set_student_activity_complete: bool | None = None
    message: str | None = None
    save_as_intention: bool | None = None
    save_response_variable_name: str | None = None
    disable_free_input: bool | None = None
    predefined_responses: list[PredefinedResponseInput] | None = None
    prompt_text: str | None = None
    response_format: str | None = None
    include_chat_log_context: bool | None = None
    include_essay: bool | None = None
    output_data_type: str | None = None
    json_response_data: str | None = None
    custom_system_role: str | None = None
    web_search: bool | None = None
    edit_doc: bool | None = None
    conditionals: list[LogicStepConditionalInput] | None = None


@strawberry.input
class ActivityFlowInput:
    client_id: str | None = None
    name: str | None = None
    steps: list[ActivityStepInput] | None = None


@strawberry.input(description="Input for creating or updating a built activity")
class BuiltActivityInput:
    id: strawberry.ID | None = None
    title: str | None = None
    user: strawberry.ID | None = None
    visibility: ActivityVisibilityEnum | None = None  # type: ignore[valid-type]
    activity_type: str | None = None
    description: str | None = None
    display_icon: str | None = None
    disabled: bool | None = None
    new_doc_recommend: bool | None = None
    flows_list: list[ActivityFlowInput] | None = None


# ============================================================================
# Union Types for Responses
# ============================================================================


@strawberry.type(description="Built activity stored successfully")
class BuiltActivitySuccess:
    built_activity: BuiltActivityType


@strawberry.type(description="Built activity deleted")
class DeleteBuiltActivitySuccess:
    activity_id: strawberry.ID


@strawberry.type(description="Activity state stored successfully")
class UserActivityStateSuccess:
    user_activity_state: UserActivityStateType


@strawberry.type(description="Built activity version stored successfully")
class BuiltActivityVersionSuccess:
    built_activity_version: BuiltActivityVersionType


BuiltActivityPayload = Annotated[
    BuiltActivitySuccess | MutationError,
    strawberry.union("BuiltActivityPayload"),
]
DeleteBuiltActivityPayload = Annotated[
    DeleteBuiltActivitySuccess | MutationError,
    strawberry.union("DeleteBuiltActivityPayload"),
]
UserActivityStatePayload = Annotated[
    UserActivityStateSuccess | MutationError,
    strawberry.union("UserActivityStatePayload"),
]
BuiltActivityVersionPayload = Annotated[
    BuiltActivityVersionSuccess | MutationError,
    strawberry.union("BuiltActivityVersionPayload"),
]


__all__ = [
    "STEP_TYPES",
    "ActivityFlowInput",
    "ActivityFlowType",
    "ActivityStepInput",
    "ActivityStepInterface",
    "ActivityStepUnion",
    "BuiltActivityInput",
    "BuiltActivityPayload",
    "BuiltActivitySnapshotType",
    "BuiltActivitySuccess",
    "BuiltActivityType",
    "BuiltActivityVersionPayload",
    "BuiltActivityVersionSuccess",
    "BuiltActivityVersionType",
    "ConditionalStepType",
    "DeleteBuiltActivityPayload",
    "DeleteBuiltActivitySuccess",
    "PromptStepType",
    "RequestUserInputStepType",
    "SystemMessageStepType",
    "UserActivityStatePayload",
    "UserActivityStateSuccess",
    "UserActivityStateType",
    "step_to_graphql",
]
