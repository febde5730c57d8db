"""Filter normalization for paginated queries.

Clients send filters either as a nested mapping (GraphQL ``JSON`` argument) or
as a URI-encoded JSON string. Both shapes are normalized into a fresh mapping
whose identifier-looking strings are converted to ``uuid.UUID`` and which always
excludes soft-deleted records.

Usage:
    from writing_service.core.pagination.normalizer import setup_filter

    predicate = setup_filter('%7B%22userId%22%3A%22abc%22%7D')
    # {"$and": [{"userId": "abc"}, {"$or": [{"deleted": False}, {"deleted": None}]}]}
"""

from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote
from uuid import UUID

from writing_service.core.pagination.exceptions import MalformedFilterError

logger = logging.getLogger(__name__)

_CANONICAL_UUID = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
)
_IDENTIFIER_LIKE = re.compile(r"^[0-9a-fA-F-]{24,36}$")

NOT_DELETED: dict[str, Any] = {"$or": [{"deleted": False}, {"deleted": None}]}


def parse_filter(raw: str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Turn a raw filter argument into a new mapping.

    Args:
        raw: ``None``, a URI-encoded JSON object string, or a mapping

    Returns:
        A mapping owned by the caller; the input is never aliased.

    Raises:
        MalformedFilterError: If the string is not JSON, the JSON is not an
            object, or the argument has an unsupported type.
    """
    if raw is None:
        return {}

    if isinstance(raw, str):
        try:
            parsed = json.loads(unquote(raw))
        except (json.JSONDecodeError, ValueError) as exc:
            raise MalformedFilterError(f"Filter is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise MalformedFilterError(
                f"Filter must be a JSON object, got {type(parsed).__name__}"
            )
        return parsed

    if isinstance(raw, Mapping):
        return copy.deepcopy(dict(raw))

    raise MalformedFilterError(f"Unsupported filter type: {type(raw).__name__}")


def coerce_identifiers(value: Any) -> Any:
    """Recursively convert canonical UUID strings into ``UUID`` objects.

    Mappings are walked value-wise and sequences element-wise; new containers
    are returned. Strings that are not canonical UUIDs are kept unchanged.
    """
    if isinstance(value, Mapping):
        return {key: coerce_identifiers(item) for key, item in value.items()}

    if isinstance(value, list | tuple):
        return [coerce_identifiers(item) for item in value]

    if isinstance(value, str):
        if _CANONICAL_UUID.match(value):
            return UUID(value)
        if _IDENTIFIER_LIKE.match(value):
            logger.debug(
                "Filter value looks like an identifier but is not a UUID",
                extra={"value": value},
            )
        return value

    return value


def setup_filter(raw: str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Build the effective predicate for a paginated query.

    The caller's predicate is parsed, its identifiers are coerced, and it is
    conjoined with the not-deleted clause. An empty predicate yields the
    not-deleted clause alone.
    """
    predicate = coerce_identifiers(parse_filter(raw))
    not_deleted = copy.deepcopy(NOT_DELETED)
    if predicate:
        return {"$and": [predicate, not_deleted]}
    return not_deleted


__all__ = [
    "NOT_DELETED",
    "coerce_identifiers",
    "parse_filter",
    "setup_filter",
]
