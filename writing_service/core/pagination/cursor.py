"""Cursor parsing, encoding and decoding for pagination.

A cursor handed to clients is a direction prefix followed by an opaque token:

    prev__<token>   page backward, ending just before the token's position
    next__<token>   page forward, starting just after the token's position
    <token>         same as next__<token>

The token is URL-safe base64 of compact JSON holding the sort field value and
the primary key of a row:

    {"v": {"created_at": "2025-01-15T10:30:00+00:00", "id": "3f0c...-..."}}

Tokens encode a position, not a record, so paging keeps working when the row
they were taken from is later deleted.
"""

from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from writing_service.core.pagination.exceptions import InvalidCursorError

PREVIOUS_PREFIX = "prev__"
NEXT_PREFIX = "next__"


class CursorDirection(str, Enum):
    """Which way a cursor moves through the ordered result set."""

    NONE = "none"
    NEXT = "next"
    PREVIOUS = "previous"


class CursorData(BaseModel):
    """Decoded token: the sort field values identifying a position.

    Attributes:
        values: Mapping of attribute name to its serialized value
    """

    values: dict[str, Any] = Field(description="Sort field values for seeking")

    model_config = {"frozen": True}


def parse_cursor(cursor: str | None) -> tuple[CursorDirection, str | None]:
    """Split a client cursor into its direction and token.

    Args:
        cursor: Cursor string as received from the client

    Returns:
        ``(direction, token)``; ``(NONE, None)`` when no cursor was given.
    """
    if not cursor:
        return CursorDirection.NONE, None
    if cursor.startswith(PREVIOUS_PREFIX):
        return CursorDirection.PREVIOUS, cursor[len(PREVIOUS_PREFIX):]
    if cursor.startswith(NEXT_PREFIX):
        return CursorDirection.NEXT, cursor[len(NEXT_PREFIX):]
    return CursorDirection.NEXT, cursor


class CursorCodec:
    """Encode and decode pagination tokens.

    Usage:
        token = CursorCodec.encode(CursorData(
            values={"created_at": datetime.now(UTC), "id": uuid4()}
        ))
        data = CursorCodec.decode(token)
        data.values  # {"created_at": "2025-...", "id": "..."}
    """

    @staticmethod
    def encode(data: CursorData) -> str:
        """Encode cursor data to an opaque token."""
        payload = {"v": CursorCodec._serialize_values(data.values)}
        json_str = json.dumps(payload, separators=(",", ":"))
        return base64.urlsafe_b64encode(json_str.encode()).decode()

    @staticmethod
    def decode(token: str) -> CursorData:
        """Decode a token back into cursor data.

        Raises:
            InvalidCursorError: If the token is not base64 JSON of the
                expected shape.
        """
        try:
            json_str = base64.urlsafe_b64decode(token.encode()).decode()
            payload = json.loads(json_str)
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValueError) as exc:
            raise InvalidCursorError(f"Invalid cursor: {exc}") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("v"), dict):
            raise InvalidCursorError("Invalid cursor: missing position values")

        return CursorData(values=payload["v"])

    @staticmethod
    def _serialize_values(values: dict[str, Any]) -> dict[str, Any]:
        """Serialize values to JSON-compatible format."""
        result: dict[str, Any] = {}
        for key, value in values.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, UUID):
                result[key] = str(value)
            else:
                result[key] = value
        return result

    @staticmethod
    def create_cursor(row: Any, sort_fields: list[str]) -> str:
        """Create a token from a model instance.

        Args:
            row: SQLAlchemy model instance
            sort_fields: Attribute names to record, sort field first

        Example:
            token = CursorCodec.create_cursor(doc, ["created_at", "id"])
        """
        values = {field: getattr(row, field, None) for field in sort_fields}
        return CursorCodec.encode(CursorData(values=values))


__all__ = [
    "NEXT_PREFIX",
    "PREVIOUS_PREFIX",
    "CursorCodec",
    "CursorData",
    "CursorDirection",
    "parse_cursor",
]
