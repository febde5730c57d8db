"""Activity builder steps.

A flow is an ordered list of steps. Each step is a tagged variant selected by
its ``stepType``; ``STEP_MODELS`` maps every kind to its model and
``parse_step`` is the only way raw step data becomes a typed step.

Steps are stored as camelCase JSON, exactly as clients send them.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator
from pydantic.alias_generators import to_camel


class StepKind(str, Enum):
    SYSTEM_MESSAGE = "SYSTEM_MESSAGE"
    REQUEST_USER_INPUT = "REQUEST_USER_INPUT"
    PROMPT = "PROMPT"
    CONDITIONAL = "CONDITIONAL"


class UnknownStepTypeError(ValueError):
    """Step data carries a missing or unsupported ``stepType``."""


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActivityStep(_CamelModel):
    """Fields shared by every step kind."""

    step_id: str
    step_type: StepKind
    jump_to_step_id: str | None = None
    set_student_activity_complete: bool = False


class SystemMessageStep(ActivityStep):
    """Show a message from the assistant."""

    step_type: StepKind = StepKind.SYSTEM_MESSAGE
    message: str = ""


class PredefinedResponse(_CamelModel):
    client_id: str = ""
    message: str = ""
    is_array: bool = False
    jump_to_step_id: str | None = None
    response_weight: str = "0"


class RequestUserInputStep(ActivityStep):
    """Ask the student for input, free text or one of the predefined responses."""

    step_type: StepKind = StepKind.REQUEST_USER_INPUT
    message: str = ""
    save_as_intention: bool = False
    save_response_variable_name: str | None = None
    disable_free_input: bool = False
    predefined_responses: list[PredefinedResponse] = Field(default_factory=list)


class PromptStep(ActivityStep):
    """Send a prompt to the AI service."""

    step_type: StepKind = StepKind.PROMPT
    prompt_text: str = ""
    response_format: str | None = None
    include_chat_log_context: bool = False
    include_essay: bool = False
    output_data_type: str = "TEXT"
    json_response_data: str | None = None
    custom_system_role: str | None = None
    web_search: bool = False
    edit_doc: bool = False


class LogicStepConditional(_CamelModel):
    state_data_key: str = ""
    checking: str = ""
    operation: str = ""
    expected_value: str = ""
    target_step_id: str = ""


class ConditionalStep(ActivityStep):
    """Branch on saved state."""

    step_type: StepKind = StepKind.CONDITIONAL
    conditionals: list[LogicStepConditional] = Field(default_factory=list)


STEP_MODELS: dict[StepKind, type[ActivityStep]] = {
    StepKind.SYSTEM_MESSAGE: SystemMessageStep,
    StepKind.REQUEST_USER_INPUT: RequestUserInputStep,
    StepKind.PROMPT: PromptStep,
    StepKind.CONDITIONAL: ConditionalStep,
}


def parse_step(data: Mapping[str, Any] | ActivityStep) -> ActivityStep:
    """Validate raw step data into the model for its kind.

    Raises:
        UnknownStepTypeError: If ``stepType`` is missing or unsupported.
        pydantic.ValidationError: If the fields do not fit the kind.
    """
    if isinstance(data, ActivityStep):
        return data
    if not isinstance(data, Mapping):
        msg = f"Step must be an object, got {type(data).__name__}"
        raise UnknownStepTypeError(msg)

    raw_kind = data.get("stepType", data.get("step_type"))
    try:
        kind = StepKind(raw_kind)
    except ValueError as exc:
        msg = f"Unsupported stepType {raw_kind!r}"
        raise UnknownStepTypeError(msg) from exc

    return STEP_MODELS[kind].model_validate(data)


class ActivityFlow(_CamelModel):
    """Named sequence of steps."""

    client_id: str = ""
    name: str = ""
    steps: list[SerializeAsAny[ActivityStep]] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def _dispatch_steps(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [parse_step(item) for item in value]


def dump_flows(flows: list[ActivityFlow]) -> list[dict[str, Any]]:
    """Serialize flows to the camelCase JSON stored on the activity."""
    return [flow.model_dump(mode="json", by_alias=True) for flow in flows]


def load_flows(raw: list[dict[str, Any]] | None) -> list[ActivityFlow]:
    """Rebuild typed flows from stored JSON."""
    return [ActivityFlow.model_validate(item) for item in raw or []]


__all__ = [
    "STEP_MODELS",
    "ActivityFlow",
    "ActivityStep",
    "ConditionalStep",
    "LogicStepConditional",
    "PredefinedResponse",
    "PromptStep",
    "RequestUserInputStep",
    "StepKind",
    "SystemMessageStep",
    "UnknownStepTypeError",
    "dump_flows",
    "load_flows",
    "parse_step",
]
