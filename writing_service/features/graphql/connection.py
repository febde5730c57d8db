"""Connection factory for paginated list queries.

``make_connection`` builds the ``<Node>Edge`` / ``<Node>Connection`` pair for
a node type; ``find_all`` builds a complete Strawberry field over a
repository: argument parsing, filter normalization, cursor handling, the
repository call and error translation.

Example:
    @strawberry.type
    class Query:
        prompts = find_all(
            get_prompt_repository(),
            PromptType,
            PromptType.from_model,
            description="List prompts with cursor pagination",
        )

Annotations in this module are evaluated eagerly: the generated types and
resolver signatures refer to classes created at call time.
"""

from collections.abc import Callable
from typing import Annotated, Any

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from writing_service.core.database.repository import BaseRepository
from writing_service.core.pagination import (
    Connection,
    CursorDirection,
    PaginateOptions,
    parse_cursor,
    setup_filter,
)
from writing_service.features.graphql.context import GraphQLContext
from writing_service.features.graphql.error_handler import query_errors
from writing_service.features.graphql.types.base import PageInfoType

FilterInvalid = Callable[[Connection[Any], GraphQLContext], Connection[Any]]

LimitArg = Annotated[
    int | None,
    strawberry.argument(description="Page size; defaults to the configured page size"),
]
FilterArg = Annotated[
    str | None,
    strawberry.argument(description="URI-encoded JSON predicate; wins over filterObject"),
]
FilterObjectArg = Annotated[
    JSON | None,
    strawberry.argument(description="Predicate as a JSON object"),
]
SortByArg = Annotated[
    str | None,
    strawberry.argument(description="Field to sort by; defaults to _id"),
]
SortAscendingArg = Annotated[
    bool | None,
    strawberry.argument(description="Sort ascending instead of descending"),
]
CursorArg = Annotated[
    str | None,
    strawberry.argument(description="startCursor or endCursor of a previous page"),
]

_TYPES: dict[type, tuple[type, type]] = {}


def _type_name(node_type: type) -> str:
    name = node_type.__name__
    return name.removesuffix("Type") or name


def make_connection(node_type: type) -> type:
    """Create (once) the Relay connection type for a node type.

    ``DocVersionType`` produces ``DocVersionEdge`` and ``DocVersionConnection``.
    """
    return _connection_types(node_type)[0]


def _connection_types(node_type: type) -> tuple[type, type]:
    cached = _TYPES.get(node_type)
    if cached is not None:
        return cached

    name = _type_name(node_type)

    @strawberry.type(name=f"{name}Edge", description=f"Edge containing a {name} node and cursor")
    class EdgeType:
        node: node_type  # type: ignore[valid-type]
        cursor: str

    @strawberry.type(name=f"{name}Connection", description=f"Paginated list of {name}")
    class ConnectionType:
        edges: list[EdgeType]
        page_info: PageInfoType

    _TYPES[node_type] = (ConnectionType, EdgeType)
    return ConnectionType, EdgeType


def to_connection(
    node_type: type,
    page: Connection[Any],
    to_node: Callable[[Any], Any],
) -> Any:
    """Convert a repository page into the GraphQL connection for node_type."""
    connection_type, edge_type = _connection_types(node_type)
    edges = [edge_type(node=to_node(edge.node), cursor=edge.cursor) for edge in page.edges]
    return connection_type(edges=edges, page_info=PageInfoType.from_page_info(page.page_info))


def build_options(
    *,
    limit: int | None,
    filter: str | None,  # noqa: A002
    filter_object: Any,
    sort_by: str | None,
    sort_ascending: bool | None,
    cursor: str | None,
) -> PaginateOptions:
    """Normalize GraphQL arguments into a page request.

    Raises:
        PaginationError: If the filter or cursor is malformed
    """
    raw_filter = filter if filter else filter_object
    direction, token = parse_cursor(cursor)
    return PaginateOptions(
        query=setup_filter(raw_filter),
        limit=limit,
        paginated_field=sort_by or "_id",
        sort_ascending=bool(sort_ascending),
        next=token if direction == CursorDirection.NEXT else None,
        previous=token if direction == CursorDirection.PREVIOUS else None,
    )


def find_all(
    repository: BaseRepository[Any],
    node_type: type,
    to_node: Callable[[Any], Any],
    filter_invalid: FilterInvalid | None = None,
    *,
    description: str | None = None,
) -> Any:
    """Build a paginated list field over a repository.

    Args:
        repository: Repository whose ``paginate`` serves the field
        node_type: Strawberry type of each node
        to_node: Converts a model instance into ``node_type``
        filter_invalid: Optional hook applied to each page before conversion
        description: Field description

    Returns:
        A Strawberry field resolving to ``<Node>Connection``
    """
    connection_type = make_connection(node_type)
    model_name = repository.model.__name__

    async def resolve(
        info: Info[GraphQLContext, None],
        limit: LimitArg = None,
        filter: FilterArg = None,  # noqa: A002
        filter_object: FilterObjectArg = None,
        sort_by: SortByArg = None,
        sort_ascending: SortAscendingArg = None,
        cursor: CursorArg = None,
    ) -> connection_type:  # type: ignore[valid-type]
        ctx = info.context
        with query_errors("graphql.find_all", model_name):
            options = build_options(
                limit=limit,
                filter=filter,
                filter_object=filter_object,
                sort_by=sort_by,
                sort_ascending=sort_ascending,
                cursor=cursor,
            )
            page = await repository.paginate(ctx.session, options)

        if filter_invalid is not None:
            page = filter_invalid(page, ctx)
        return to_connection(node_type, page, to_node)

    return strawberry.field(
        resolver=resolve,
        description=description or f"List {model_name} records with cursor pagination",
    )


__all__ = ["build_options", "find_all", "make_connection", "to_connection"]
