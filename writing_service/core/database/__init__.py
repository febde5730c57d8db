"""Core database package: declarative base, mixins, exceptions and filters.

Base Classes and Mixins:
    - Base: Declarative base with constraint naming convention
    - UUIDPKMixin: UUID v4 primary key
    - TimestampMixin: created_at, updated_at tracking
    - SoftDeleteFlagMixin: nullable ``deleted`` flag
    - DocumentBase: all three, for stored document types

Query Filters:
    - StatementFilter: base class for statement transformers
    - PredicateFilter: document-style predicate compiler

Exceptions:
    - RepositoryError, NotFoundError, InvalidFilterError

The generic repository lives in ``writing_service.core.database.repository``
because it depends on the pagination engine, which itself builds on the
filters defined here.
"""

from writing_service.core.database.base import (
    NAMING_CONVENTION,
    Base,
    DocumentBase,
    SoftDeleteFlagMixin,
    TimestampMixin,
    UUIDPKMixin,
)
from writing_service.core.database.exceptions import (
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
)
from writing_service.core.database.filters import (
    PredicateFilter,
    StatementFilter,
    resolve_column,
    to_snake_case,
)

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "DocumentBase",
    "InvalidFilterError",
    "NotFoundError",
    "PredicateFilter",
    "RepositoryError",
    "SoftDeleteFlagMixin",
    "StatementFilter",
    "TimestampMixin",
    "UUIDPKMixin",
    "resolve_column",
    "to_snake_case",
]
