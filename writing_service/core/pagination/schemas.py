"""Pagination request and response schemas.

``PaginateOptions`` is what resolvers hand to ``BaseRepository.paginate``;
``Connection`` (Relay style edges plus page info) is what comes back. Both are
storage agnostic: nodes are whatever the repository's model is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PaginateOptions:
    """A single page request.

    Attributes:
        query: Normalized predicate, usually the output of ``setup_filter``
        limit: Page size; None selects the configured default
        paginated_field: Sort field as the client spells it; ``_id`` is the pk
        sort_ascending: Display direction
        next: Token to continue after (forward page)
        previous: Token to stop before (backward page)
    """

    query: dict[str, Any] = field(default_factory=dict)
    limit: int | None = None
    paginated_field: str = "_id"
    sort_ascending: bool = False
    next: str | None = None
    previous: str | None = None


class PageInfo(BaseModel):
    """Pagination metadata following the GraphQL Relay specification.

    Attributes:
        has_previous_page: Whether there are items before the current page
        has_next_page: Whether there are items after the current page
        start_cursor: ``prev__`` cursor of the first item in this page
        end_cursor: ``next__`` cursor of the last item in this page
    """

    has_previous_page: bool = Field(description="Whether previous items exist")
    has_next_page: bool = Field(description="Whether more items exist")
    start_cursor: str | None = Field(default=None, description="Cursor before the first item")
    end_cursor: str | None = Field(default=None, description="Cursor after the last item")


class Edge(BaseModel, Generic[T]):
    """Edge wrapper for paginated items (Relay pattern)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    node: T = Field(description="The data item")
    cursor: str = Field(description="Token for this item")


class Connection(BaseModel, Generic[T]):
    """One page of results.

    Attributes:
        edges: Items with their tokens, in display order
        page_info: Navigation metadata
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    edges: list[Edge[T]] = Field(default_factory=list, description="Items with cursors")
    page_info: PageInfo = Field(description="Pagination metadata")

    @property
    def nodes(self) -> list[T]:
        """Get just the nodes without edge wrappers."""
        return [edge.node for edge in self.edges]


__all__ = ["Connection", "Edge", "PageInfo", "PaginateOptions"]
