"""Keyset filter for SQLAlchemy queries.

The KeysetFilter implements seek pagination over a total order made of the
requested sort column and the primary key:

    ORDER BY created_at ASC NULLS FIRST, id ASC

With a cursor at (t1, id1), a forward page continues with

    WHERE created_at > t1 OR (created_at = t1 AND id > id1)

NULL sort values rank below every other value, so NULL positions get their own
seek conditions. A backward page flips every direction and the caller reverses
the fetched rows back into display order.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import DateTime, Select, Uuid, and_, or_

from writing_service.core.database.filters import StatementFilter
from writing_service.core.pagination.cursor import CursorData, CursorDirection
from writing_service.core.pagination.exceptions import (
    InvalidCursorError,
    InvalidLimitError,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.elements import ColumnElement


def resolve_limit(limit: int | None, *, default_limit: int, max_limit: int) -> int:
    """Apply the page size policy.

    ``None`` selects ``default_limit``. Values are never clamped.

    Raises:
        InvalidLimitError: If limit is not positive or exceeds max_limit.
    """
    if limit is None:
        return default_limit
    if limit <= 0:
        raise InvalidLimitError(f"limit must be positive, got {limit}")
    if limit > max_limit:
        raise InvalidLimitError(f"limit must not exceed {max_limit}, got {limit}")
    return limit


class KeysetFilter(StatementFilter):
    """Apply keyset pagination to a SQLAlchemy query.

    Example:
        stmt = KeysetFilter(
            sort_column=DocVersion.created_at,
            pk_column=DocVersion.id,
            ascending=True,
            direction=CursorDirection.NEXT,
            cursor=CursorCodec.decode(token),
            limit=20,
        ).apply(select(DocVersion))

    Attributes:
        sort_column: Requested sort attribute
        pk_column: Primary key attribute, the tie breaker
        ascending: Requested display direction
        direction: NEXT, PREVIOUS or NONE (first page)
        limit: Page size; one extra row is fetched
    """

    def __init__(
        self,
        sort_column: InstrumentedAttribute[Any],
        pk_column: InstrumentedAttribute[Any],
        *,
        ascending: bool,
        direction: CursorDirection = CursorDirection.NONE,
        cursor: CursorData | None = None,
        limit: int,
    ) -> None:
        self.sort_column = sort_column
        self.pk_column = pk_column
        self.ascending = ascending
        self.direction = direction if cursor is not None else CursorDirection.NONE
        self.limit = limit
        self._position = self._read_position(cursor) if cursor is not None else None

    @property
    def sorts_by_pk(self) -> bool:
        return self.sort_column.key == self.pk_column.key

    @property
    def sort_fields(self) -> list[str]:
        """Attribute names a token for this ordering must carry."""
        if self.sorts_by_pk:
            return [self.pk_column.key]
        return [self.sort_column.key, self.pk_column.key]

    @property
    def effective_ascending(self) -> bool:
        """Direction rows are fetched in; flipped for backward pages."""
        if self.direction == CursorDirection.PREVIOUS:
            return not self.ascending
        return self.ascending

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Add ORDER BY, the seek condition and LIMIT ``limit + 1``."""
        statement = self._apply_ordering(statement)
        if self._position is not None:
            statement = statement.where(self._seek_condition(*self._position))
        return statement.limit(self.limit + 1)

    def _apply_ordering(self, statement: Select[Any]) -> Select[Any]:
        if self.effective_ascending:
            if not self.sorts_by_pk:
                statement = statement.order_by(self.sort_column.asc().nulls_first())
            return statement.order_by(self.pk_column.asc())

        if not self.sorts_by_pk:
            statement = statement.order_by(self.sort_column.desc().nulls_last())
        return statement.order_by(self.pk_column.desc())

    def _seek_condition(self, value: Any, pk_value: Any) -> ColumnElement[bool]:
        """Rows strictly after ``(value, pk_value)`` in fetch order."""
        pk = self.pk_column
        if self.sorts_by_pk:
            return pk > pk_value if self.effective_ascending else pk < pk_value

        column = self.sort_column
        if self.effective_ascending:
            if value is None:
                return or_(and_(column.is_(None), pk > pk_value), column.is_not(None))
            return or_(column > value, and_(column == value, pk > pk_value))

        if value is None:
            return and_(column.is_(None), pk < pk_value)
        return or_(
            column < value,
            and_(column == value, pk < pk_value),
            column.is_(None),
        )

    def _read_position(self, cursor: CursorData) -> tuple[Any, Any]:
        """Validate the token against this ordering and convert its values.

        Raises:
            InvalidCursorError: If the token was issued for another sort
                field or its values do not fit the columns.
        """
        if set(cursor.values) != set(self.sort_fields):
            msg = (
                "Cursor does not match the requested sort "
                f"(expected fields {self.sort_fields}, got {sorted(cursor.values)})"
            )
            raise InvalidCursorError(msg)

        pk_value = self._convert_cursor_value(
            self.pk_column, cursor.values[self.pk_column.key]
        )
        if pk_value is None:
            raise InvalidCursorError("Cursor is missing its primary key value")
        if self.sorts_by_pk:
            return pk_value, pk_value

        value = self._convert_cursor_value(
            self.sort_column, cursor.values[self.sort_column.key]
        )
        return value, pk_value

    def _convert_cursor_value(
        self,
        column: InstrumentedAttribute[Any],
        value: Any,
    ) -> Any:
        """Convert a serialized token value back to the column's Python type."""
        if value is None:
            return None

        column_type = column.type
        try:
            if isinstance(column_type, DateTime) and isinstance(value, str):
                return datetime.fromisoformat(value)
            if isinstance(column_type, Uuid) and isinstance(value, str):
                return UUID(value)
        except ValueError as exc:
            msg = f"Invalid cursor value for '{column.key}': {value!r}"
            raise InvalidCursorError(msg) from exc

        if isinstance(value, dict | list):
            msg = f"Invalid cursor value for '{column.key}': {value!r}"
            raise InvalidCursorError(msg)
        return value


__all__ = ["KeysetFilter", "resolve_limit"]
