"""Cursor-based pagination engine.

This module provides keyset pagination that is:
- Stable: Results don't shift when data changes between pages
- Filterable: Document-style predicates, supplied as objects or URI-encoded JSON
- Bidirectional: ``next__`` and ``prev__`` cursors page either way

Usage:
    options = PaginateOptions(
        query=setup_filter(raw_filter),
        limit=20,
        paginated_field="createdAt",
        sort_ascending=False,
        next=token,
    )
    connection = await repository.paginate(session, options)
"""

from writing_service.core.pagination.cursor import (
    CursorCodec,
    CursorData,
    CursorDirection,
    parse_cursor,
)
from writing_service.core.pagination.exceptions import (
    InvalidCursorError,
    InvalidLimitError,
    MalformedFilterError,
    PaginationError,
)
from writing_service.core.pagination.keyset import KeysetFilter, resolve_limit
from writing_service.core.pagination.normalizer import (
    coerce_identifiers,
    parse_filter,
    setup_filter,
)
from writing_service.core.pagination.schemas import (
    Connection,
    Edge,
    PageInfo,
    PaginateOptions,
)

__all__ = [
    "Connection",
    "CursorCodec",
    "CursorData",
    "CursorDirection",
    "Edge",
    "InvalidCursorError",
    "InvalidLimitError",
    "KeysetFilter",
    "MalformedFilterError",
    "PageInfo",
    "PaginateOptions",
    "PaginationError",
    "coerce_identifiers",
    "parse_cursor",
    "parse_filter",
    "resolve_limit",
    "setup_filter",
]
