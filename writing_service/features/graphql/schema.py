"""GraphQL schema assembly.

Combines the Query and Mutation root types into a single schema with the
configured extensions. Errors are logged through ``error_handler.log_error``
instead of Strawberry's default logger.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import strawberry

from writing_service.features.graphql.error_handler import log_error
from writing_service.features.graphql.extensions import get_extensions
from writing_service.features.graphql.resolvers import Mutation, Query

if TYPE_CHECKING:
    from graphql import GraphQLError
    from strawberry.types import ExecutionContext

logger = logging.getLogger(__name__)


class ErrorLoggingSchema(strawberry.Schema):
    """Schema that logs each error once, at a level matching its category."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        for error in errors:
            log_error(error, execution_context)


def create_schema() -> strawberry.Schema:
    """Build the schema with extensions from current settings."""
    return ErrorLoggingSchema(
        query=Query,
        mutation=Mutation,
        extensions=get_extensions(),
    )


schema = create_schema()

logger.debug("GraphQL schema created successfully")

__all__ = ["ErrorLoggingSchema", "create_schema", "schema"]
