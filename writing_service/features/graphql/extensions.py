"""Strawberry extensions for the GraphQL schema.

Provides:
- Query depth limiting (``GRAPHQL_MAX_QUERY_DEPTH``)
- Masking of internal errors in production
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from strawberry.extensions import MaskErrors, QueryDepthLimiter, SchemaExtension

from writing_service.core.settings import get_app_settings, get_graphql_settings
from writing_service.features.graphql.error_handler import is_user_facing_error

logger = logging.getLogger(__name__)

MASKED_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def get_extensions() -> list[Callable[[], SchemaExtension]]:
    """Get extension factories for the schema.

    Strawberry calls each factory per request, so every operation gets fresh
    extension instances.
    """
    graphql_settings = get_graphql_settings()
    max_depth = graphql_settings.max_query_depth
    extensions: list[Callable[[], SchemaExtension]] = [
        lambda: QueryDepthLimiter(max_depth=max_depth),
    ]

    mask = get_app_settings().is_production
    if mask:
        extensions.append(
            lambda: MaskErrors(
                should_mask_error=lambda error: not is_user_facing_error(error),
                error_message=MASKED_ERROR_MESSAGE,
            )
        )

    logger.debug(
        "GraphQL extensions configured: depth limit=%s, masking=%s",
        graphql_settings.max_query_depth,
        mask,
    )
    return extensions


__all__ = ["MASKED_ERROR_MESSAGE", "get_extensions"]
