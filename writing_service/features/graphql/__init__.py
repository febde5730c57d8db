"""GraphQL feature module using Strawberry.

This module provides the GraphQL API endpoint with:
- Paginated list queries built by one connection factory (``find_all``)
- Plain fetch queries for documents, prompt runs and activities
- Mutation resolvers with union error payloads
- Caller identity taken from gateway headers
"""

from __future__ import annotations

from typing import Any

__all__ = ["create_graphql_router", "schema"]


def __getattr__(name: str) -> Any:
    if name == "create_graphql_router":
        from writing_service.features.graphql.router import create_graphql_router

        return create_graphql_router
    if name == "schema":
        from writing_service.features.graphql.schema import schema as graphql_schema

        return graphql_schema
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
