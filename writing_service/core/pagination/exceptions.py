"""Errors raised while interpreting a page request.

All of them describe malformed caller input. Resolvers turn them into
user-facing validation errors; they never indicate a storage failure.
"""

from __future__ import annotations


class PaginationError(ValueError):
    """Base class for malformed page requests.

    Attributes:
        argument: Name of the GraphQL argument at fault, if known
    """

    argument: str | None = None

    def __init__(self, message: str, argument: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if argument is not None:
            self.argument = argument


class MalformedFilterError(PaginationError):
    """Filter string is not URI-encoded JSON describing an object."""

    argument = "filter"


class InvalidCursorError(PaginationError):
    """Cursor token cannot be decoded or does not fit the requested sort."""

    argument = "cursor"


class InvalidLimitError(PaginationError):
    """Page size is zero, negative, or above the configured maximum."""

    argument = "limit"


__all__ = [
    "InvalidCursorError",
    "InvalidLimitError",
    "MalformedFilterError",
    "PaginationError",
]
