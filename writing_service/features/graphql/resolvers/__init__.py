"""GraphQL resolvers for queries and mutations.

This package contains:
- queries.py: paginated lists and plain fetches
- mutations.py: write operations returning union payloads
- helpers.py: input conversion, ID parsing, and mutation error payloads
"""

from __future__ import annotations

from writing_service.features.graphql.resolvers.mutations import Mutation
from writing_service.features.graphql.resolvers.queries import Query

__all__ = ["Mutation", "Query"]
