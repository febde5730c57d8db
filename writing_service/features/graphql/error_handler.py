"""GraphQL error classification, logging and formatting.

Every error leaving an operation is logged once from the schema's
``process_errors`` hook: user-facing errors at INFO, internal ones at ERROR
with the stack trace. In production the ``MaskErrors`` extension replaces
internal errors with a generic message; ``is_user_facing_error`` decides which
errors are left alone.

Resolvers raise errors through the helpers below so that ``extensions.code``
is always one of the ``ErrorCategory`` values:

    with query_errors("graphql.find_all", "DocVersion"):
        connection = await repository.paginate(session, options)
"""

from __future__ import annotations

import logging
import traceback
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from graphql import GraphQLError
from sqlalchemy.exc import SQLAlchemyError

from writing_service.core.database.exceptions import InvalidFilterError
from writing_service.core.pagination.exceptions import PaginationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from strawberry.types import ExecutionContext

logger = logging.getLogger(__name__)

__all__ = [
    "ErrorCategory",
    "format_internal_error",
    "format_validation_error",
    "is_user_facing_error",
    "log_error",
    "query_errors",
]


class ErrorCategory:
    """Error codes carried in ``extensions.code``."""

    VALIDATION = "VALIDATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DEPTH_LIMIT = "DEPTH_LIMIT_EXCEEDED"
    INTERNAL = "INTERNAL_ERROR"


_USER_FACING_CODES = frozenset(
    {
        ErrorCategory.VALIDATION,
        ErrorCategory.AUTHORIZATION,
        ErrorCategory.NOT_FOUND,
        ErrorCategory.DEPTH_LIMIT,
    }
)


def is_user_facing_error(error: GraphQLError) -> bool:
    """Determine if error should be shown to the client as-is.

    User-facing errors are:
    - errors raised with a user-facing ``extensions.code``
    - request errors (syntax, unknown fields, bad variables, depth limit),
      which never wrap a Python exception

    Everything else wraps an unexpected exception and is internal.
    """
    code = (error.extensions or {}).get("code")
    if code == ErrorCategory.INTERNAL:
        return False
    if code in _USER_FACING_CODES:
        return True
    return error.original_error is None


def log_error(error: GraphQLError, execution_context: ExecutionContext | None = None) -> None:
    """Log error with full details for server-side debugging."""
    log_context: dict[str, Any] = {
        "error_message": error.message,
        "error_path": error.path,
        "error_code": (error.extensions or {}).get("code"),
    }

    if execution_context is not None:
        if execution_context.operation_name:
            log_context["operation_name"] = execution_context.operation_name
        context = execution_context.context
        user_id = getattr(context, "user_id", None)
        if user_id is not None:
            log_context["user_id"] = str(user_id)
        request_id = getattr(context, "request_id", None)
        if request_id:
            log_context["request_id"] = request_id

    original = error.original_error
    user_facing = is_user_facing_error(error)
    if original is not None:
        log_context["exception_type"] = type(original).__name__
        log_context["exception_message"] = str(original)
        if not user_facing:
            log_context["stack_trace"] = "".join(
                traceback.format_exception(type(original), original, original.__traceback__)
            )

    if user_facing:
        logger.info("GraphQL user-facing error", extra=log_context)
    else:
        logger.error("GraphQL internal error", extra=log_context)


def format_validation_error(message: str, field: str | None = None) -> GraphQLError:
    """Create a validation error for malformed client input.

    Example:
        raise format_validation_error("limit must be positive", field="limit")
    """
    extensions: dict[str, Any] = {"code": ErrorCategory.VALIDATION}
    if field:
        extensions["field"] = field
    return GraphQLError(message=message, extensions=extensions)


def format_internal_error(message: str = "Failed to read from storage") -> GraphQLError:
    """Create an error for a storage or other server-side failure."""
    return GraphQLError(message=message, extensions={"code": ErrorCategory.INTERNAL})


@contextmanager
def query_errors(operation: str, entity: str | None = None) -> Iterator[None]:
    """Translate errors raised by a query resolver body.

    Malformed input becomes a validation error. A storage failure is logged
    with its traceback and becomes an internal error.

    Example:
        with query_errors("graphql.fetch_prompt_runs", "PromptRun"):
            runs = await repo.list_for_user(ctx.session, user_id)
    """
    try:
        yield
    except PaginationError as exc:
        raise format_validation_error(str(exc), field=exc.argument) from exc
    except InvalidFilterError as exc:
        raise format_validation_error(str(exc), field=exc.filter_name) from exc
    except SQLAlchemyError as exc:
        logger.exception(
            "Query failed",
            extra={"entity": entity, "operation": operation},
        )
        raise format_internal_error() from exc
