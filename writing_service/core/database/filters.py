"""Query filtering utilities for SQLAlchemy.

Filters work directly with SQLAlchemy statements without hiding the query.
``PredicateFilter`` compiles the document-style predicates accepted by the
GraphQL list queries into a WHERE clause:

    {"$and": [
        {"userId": UUID("..."), "createdAt": {"$gte": "2025-01-01T00:00:00Z"}},
        {"$or": [{"deleted": False}, {"deleted": None}]},
    ]}

Usage:
    from sqlalchemy import select
    from writing_service.core.database.filters import PredicateFilter

    stmt = PredicateFilter(DocVersion, {"docId": "abc"}).apply(select(DocVersion))
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    DateTime,
    Select,
    Uuid,
    and_,
    false,
    func,
    not_,
    or_,
    true,
)
from sqlalchemy import inspect as sa_inspect

from writing_service.core.database.exceptions import InvalidFilterError

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.elements import ColumnElement

PRIMARY_KEY_ALIASES = frozenset({"_id", "id"})
LOGICAL_OPERATORS = frozenset({"$and", "$or", "$nor"})
FIELD_OPERATORS = frozenset(
    {"$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$exists"}
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class _Unmatchable:
    """Operand that cannot equal any stored value of its column."""


_UNMATCHABLE = _Unmatchable()


class StatementFilter(ABC):
    """Base class for statement filters.

    All filters implement `apply()` which modifies a SQLAlchemy statement.
    """

    @abstractmethod
    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply filter to statement.

        Args:
            statement: SQLAlchemy select statement

        Returns:
            Modified select statement
        """
        ...


def to_snake_case(name: str) -> str:
    """Convert a camelCase GraphQL field name to a snake_case attribute."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def resolve_column(model: type[Any], name: str) -> InstrumentedAttribute[Any]:
    """Resolve a client field name to a mapped column attribute.

    ``_id`` and ``id`` map to the primary key; camelCase names map to their
    snake_case attribute.

    Raises:
        InvalidFilterError: If the model has no such column.
    """
    mapper = sa_inspect(model)
    if name in PRIMARY_KEY_ALIASES:
        return getattr(model, mapper.primary_key[0].key)

    column_keys = {attr.key for attr in mapper.column_attrs}
    for candidate in (name, to_snake_case(name)):
        if candidate in column_keys:
            return getattr(model, candidate)

    msg = f"Unknown field '{name}' for {model.__name__}"
    raise InvalidFilterError(msg, filter_name=name)


def _column_type(attribute: InstrumentedAttribute[Any]) -> Any:
    return attribute.property.columns[0].type


class PredicateFilter(StatementFilter):
    """Compile a document-style predicate into a WHERE clause.

    Logical operators ``$and``, ``$or`` and ``$nor`` take lists of
    sub-predicates. Field entries map a field name to a plain value
    (equality) or to an operator mapping using ``$eq``, ``$ne``, ``$gt``,
    ``$gte``, ``$lt``, ``$lte``, ``$in``, ``$nin`` and ``$exists``.

    ``None`` matches NULL. ``$ne``, ``$nin`` and ``$nor`` also match rows
    where the field is NULL. Dotted field names descend into JSON columns.

    Example:
        PredicateFilter(
            BuiltActivity,
            {"$or": [{"user": user_id}, {"visibility": {"$in": ["READ_ONLY", "EDITABLE"]}}]},
        ).apply(select(BuiltActivity))

    Raises:
        InvalidFilterError: On unknown fields or operators and malformed
            operands. Raised by ``compile()`` and ``apply()``.
    """

    def __init__(self, model: type[Any], predicate: Mapping[str, Any] | None):
        self.model = model
        self.predicate = predicate or {}

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply the compiled predicate to statement."""
        return statement.where(self.compile())

    def compile(self) -> ColumnElement[bool]:
        """Return the boolean clause for the whole predicate."""
        return self._compile_predicate(self.predicate)

    def _compile_predicate(self, predicate: Any) -> ColumnElement[bool]:
        if not isinstance(predicate, Mapping):
            msg = f"Predicate must be an object, got {type(predicate).__name__}"
            raise InvalidFilterError(msg)

        clauses = []
        for key, value in predicate.items():
            if key in LOGICAL_OPERATORS:
                clauses.append(self._compile_logical(key, value))
            elif key.startswith("$"):
                msg = f"Unsupported operator '{key}'"
                raise InvalidFilterError(msg, filter_name=key)
            else:
                clauses.append(self._compile_field(key, value))

        if not clauses:
            return true()
        if len(clauses) == 1:
            return clauses[0]
        return and_(*clauses)

    def _compile_logical(self, operator: str, operands: Any) -> ColumnElement[bool]:
        if not isinstance(operands, list) or not operands:
            msg = f"'{operator}' expects a non-empty list of predicates"
            raise InvalidFilterError(msg, filter_name=operator)

        parts = [self._compile_predicate(operand) for operand in operands]
        if operator == "$and":
            return and_(*parts)
        if operator == "$or":
            return or_(*parts)
        # NULL comparisons count as not matching
        return and_(*(not_(func.coalesce(part, false())) for part in parts))

    def _compile_field(self, name: str, condition: Any) -> ColumnElement[bool]:
        if isinstance(condition, Mapping):
            operators = list(condition)
            if not operators or not all(str(op).startswith("$") for op in operators):
                msg = f"Field '{name}' expects a value or an operator object"
                raise InvalidFilterError(msg, filter_name=name)
            parts = [
                self._compile_operator(name, op, operand)
                for op, operand in condition.items()
            ]
            return parts[0] if len(parts) == 1 else and_(*parts)

        return self._compile_operator(name, "$eq", condition)

    def _compile_operator(
        self, name: str, operator: str, operand: Any
    ) -> ColumnElement[bool]:
        if operator not in FIELD_OPERATORS:
            msg = f"Unsupported operator '{operator}' on field '{name}'"
            raise InvalidFilterError(msg, filter_name=operator)

        if operator == "$exists":
            if not isinstance(operand, bool):
                msg = f"'$exists' on field '{name}' expects a boolean"
                raise InvalidFilterError(msg, filter_name=name)
            column = self._expression(name, None)
            return column.is_not(None) if operand else column.is_(None)

        if operator in ("$in", "$nin"):
            return self._compile_membership(name, operator, operand)

        if isinstance(operand, list | dict):
            msg = f"'{operator}' on field '{name}' expects a scalar value"
            raise InvalidFilterError(msg, filter_name=name)

        column = self._expression(name, operand)
        value = self._adapt(column, operand)

        if operator == "$eq":
            if value is None:
                return column.is_(None)
            if value is _UNMATCHABLE:
                return false()
            return column == value

        if operator == "$ne":
            if value is None:
                return column.is_not(None)
            if value is _UNMATCHABLE:
                return true()
            return or_(column != value, column.is_(None))

        if value is None:
            msg = f"'{operator}' on field '{name}' expects a non-null value"
            raise InvalidFilterError(msg, filter_name=name)
        if value is _UNMATCHABLE:
            return false()
        if operator == "$gt":
            return column > value
        if operator == "$gte":
            return column >= value
        if operator == "$lt":
            return column < value
        return column <= value

    def _compile_membership(
        self, name: str, operator: str, operand: Any
    ) -> ColumnElement[bool]:
        if not isinstance(operand, list):
            msg = f"'{operator}' on field '{name}' expects a list"
            raise InvalidFilterError(msg, filter_name=name)

        sample = next((item for item in operand if item is not None), None)
        column = self._expression(name, sample)
        includes_null = any(item is None for item in operand)
        values = [
            adapted
            for adapted in (self._adapt(column, item) for item in operand if item is not None)
            if adapted is not _UNMATCHABLE
        ]

        if operator == "$in":
            clauses = []
            if values:
                clauses.append(column.in_(values))
            if includes_null:
                clauses.append(column.is_(None))
            if not clauses:
                return false()
            return clauses[0] if len(clauses) == 1 else or_(*clauses)

        if includes_null:
            if values:
                return and_(column.not_in(values), column.is_not(None))
            return column.is_not(None)
        if values:
            return or_(column.not_in(values), column.is_(None))
        return true()

    def _expression(self, name: str, sample: Any) -> Any:
        """Column expression for ``name``; JSON paths are cast by ``sample``."""
        head, _, rest = name.partition(".")
        if not rest:
            return resolve_column(self.model, name)

        column = resolve_column(self.model, head)
        if not isinstance(_column_type(column), JSON):
            msg = f"Field '{head}' is not a JSON column; cannot filter on '{name}'"
            raise InvalidFilterError(msg, filter_name=name)

        path = tuple(rest.split("."))
        element = column[path] if len(path) > 1 else column[path[0]]
        if isinstance(sample, bool):
            return element.as_boolean()
        if isinstance(sample, int):
            return element.as_integer()
        if isinstance(sample, float):
            return element.as_float()
        return element.as_string()

    def _adapt(self, column: Any, value: Any) -> Any:
        """Adapt a filter operand to the type of the column it is bound to."""
        if value is None:
            return None

        column_type = getattr(column, "type", None)

        if isinstance(column_type, Uuid):
            if isinstance(value, UUID):
                return value
            if isinstance(value, str):
                try:
                    return UUID(value)
                except ValueError:
                    return _UNMATCHABLE
            return _UNMATCHABLE

        if isinstance(column_type, DateTime) and isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError as exc:
                msg = f"Invalid datetime value {value!r}"
                raise InvalidFilterError(msg) from exc

        if isinstance(value, UUID):
            return str(value)

        return value


__all__ = [
    "PredicateFilter",
    "StatementFilter",
    "resolve_column",
    "to_snake_case",
]
