"""GraphQL server configuration settings.

Controls the GraphQL endpoint, IDE, and query limits.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GraphQLIDE = Literal["graphiql", "apollo-sandbox", "pathfinder", False]


class GraphQLSettings(BaseSettings):
    """GraphQL server configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_PATH=/graphql, GRAPHQL_GRAPHQL_IDE=false
    """

    enabled: bool = Field(default=True, description="Enable GraphQL endpoint")
    path: str = Field(
        default="/graphql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL endpoint path",
    )
    graphql_ide: GraphQLIDE = Field(
        default="graphiql",
        description="GraphQL IDE to serve on GET, or false to disable",
    )
    max_query_depth: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum query nesting depth",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def ide(self) -> str | None:
        """IDE name for GraphQLRouter, or None when disabled."""
        return self.graphql_ide or None
