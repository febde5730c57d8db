"""Helpers shared by the query and mutation resolvers.

Converting Strawberry inputs into validated column values, parsing ID
arguments, and turning failures into ``MutationError`` payloads.
"""

from __future__ import annotations

import dataclasses
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from writing_service.features.graphql.error_handler import format_validation_error
from writing_service.features.graphql.types.base import MutationError, MutationErrorCode

if TYPE_CHECKING:
    from pydantic import BaseModel, ValidationError

    from writing_service.features.graphql.context import GraphQLContext

logger = logging.getLogger(__name__)


def id_or_new(raw: str | None) -> UUID:
    """The UUID in raw, or a fresh one when raw is absent or not a UUID."""
    if raw:
        try:
            return UUID(str(raw))
        except ValueError:
            pass
    return uuid4()


def parse_id_argument(value: str, field: str) -> UUID:
    """Parse an ID argument or raise a validation error naming the argument."""
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise format_validation_error(f"{field} must be a UUID", field=field) from exc


def input_to_data(value: Any) -> Any:
    """Convert a Strawberry input into plain data, dropping unset (None) fields."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: input_to_data(getattr(value, field.name))
            for field in dataclasses.fields(value)
            if getattr(value, field.name) is not None
        }
    if isinstance(value, list):
        return [input_to_data(item) for item in value]
    return value


def to_columns(
    data: BaseModel,
    *,
    json_fields: set[str] | frozenset[str] = frozenset(),
    exclude: set[str] | None = None,
    exclude_unset: bool = False,
) -> dict[str, Any]:
    """Column values for a validated payload.

    ``json_fields`` are dumped in JSON mode so they can be stored in JSON
    columns; enum members are stored by value.
    """
    skip = set(exclude or ())
    values = data.model_dump(exclude=skip | json_fields, exclude_unset=exclude_unset)
    if json_fields - skip:
        values.update(
            data.model_dump(
                mode="json",
                include=json_fields - skip,
                exclude_unset=exclude_unset,
            )
        )
    return {key: value.value if isinstance(value, Enum) else value for key, value in values.items()}


def validation_failure(exc: ValidationError) -> MutationError:
    first = exc.errors()[0]
    location = first.get("loc") or ()
    return MutationError(
        code=MutationErrorCode.VALIDATION_ERROR,
        message=f"Invalid input: {first['msg']}",
        field=".".join(str(part) for part in location) or None,
    )


def not_a_uuid(field: str) -> MutationError:
    return MutationError(
        code=MutationErrorCode.VALIDATION_ERROR,
        message=f"{field} must be a UUID",
        field=field,
    )


async def storage_failure(ctx: GraphQLContext, operation: str) -> MutationError:
    """Roll back and report a storage error; call from an except block."""
    logger.exception("Mutation failed", extra={"operation": operation})
    await ctx.session.rollback()
    return MutationError(
        code=MutationErrorCode.INTERNAL_ERROR,
        message="Failed to write to storage",
    )


__all__ = [
    "id_or_new",
    "input_to_data",
    "not_a_uuid",
    "parse_id_argument",
    "storage_failure",
    "to_columns",
    "validation_failure",
]
