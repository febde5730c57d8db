"""Base GraphQL types shared by every feature.

Provides the Relay page info type that mirrors
``writing_service.core.pagination.schemas.PageInfo`` and the error member of
every mutation payload union.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import strawberry

if TYPE_CHECKING:
    from writing_service.core.pagination.schemas import PageInfo


@strawberry.type(description="Pagination metadata following GraphQL Relay specification")
class PageInfoType:
    """GraphQL Relay PageInfo for cursor-based pagination."""

    has_previous_page: bool = strawberry.field(description="Whether previous items exist")
    has_next_page: bool = strawberry.field(description="Whether more items exist")
    start_cursor: str | None = strawberry.field(
        default=None,
        description="Pass as cursor to fetch the page before this one",
    )
    end_cursor: str | None = strawberry.field(
        default=None,
        description="Pass as cursor to fetch the page after this one",
    )

    @classmethod
    def from_page_info(cls, page_info: PageInfo) -> PageInfoType:
        return cls(
            has_previous_page=page_info.has_previous_page,
            has_next_page=page_info.has_next_page,
            start_cursor=page_info.start_cursor,
            end_cursor=page_info.end_cursor,
        )


@strawberry.enum(description="Mutation error codes")
class MutationErrorCode(str, Enum):
    """Error codes for mutation payloads."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@strawberry.type(description="Mutation failure")
class MutationError:
    """Error member of every ``<Name>Payload`` union."""

    code: MutationErrorCode
    message: str
    field: str | None = None


__all__ = ["MutationError", "MutationErrorCode", "PageInfoType"]
