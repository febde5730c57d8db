"""Minimal generic repository for SQLAlchemy models.

Provides CRUD, predicate lookups and keyset pagination with explicit session
passing. For complex queries, use the session directly.

Example:
    from writing_service.core.database.repository import BaseRepository
    from writing_service.features.documents.models import DocVersion

    class DocVersionRepository(BaseRepository[DocVersion]):
        async def most_recent(self, session: AsyncSession, doc_id: str) -> DocVersion | None:
            ...

    repo = DocVersionRepository(DocVersion)
    page = await repo.paginate(session, PaginateOptions(query=setup_filter(None), limit=20))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select

from writing_service.core.database.exceptions import InvalidFilterError, NotFoundError
from writing_service.core.database.filters import PredicateFilter, resolve_column
from writing_service.core.pagination.cursor import (
    NEXT_PREFIX,
    PREVIOUS_PREFIX,
    CursorCodec,
    CursorDirection,
)
from writing_service.core.pagination.keyset import KeysetFilter, resolve_limit
from writing_service.core.pagination.normalizer import setup_filter
from writing_service.core.pagination.schemas import (
    Connection,
    Edge,
    PageInfo,
    PaginateOptions,
)
from writing_service.core.settings import get_pagination_settings
from writing_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Minimal generic repository for CRUD and pagination.

    Provides:
        - get(session, id) -> T | None
        - get_or_raise(session, id) -> T (raises NotFoundError)
        - get_by(session, attr, value) -> T | None
        - find(session, query, ...) -> Sequence[T]
        - find_one(session, query) -> T | None
        - create(session, instance) -> T
        - update(session, instance, values) -> T
        - upsert(session, match, values) -> tuple[T, bool]
        - soft_delete(session, instance) -> T
        - paginate(session, options) -> Connection[T]

    ``find``/``find_one`` take the same document-style predicates as
    ``paginate`` and exclude soft-deleted rows unless asked otherwise.
    """

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., GoogleDoc, Prompt)
        """
        self.model = model
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    async def get(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
    ) -> T | None:
        """Get entity by primary key, soft-deleted or not."""
        instance = await session.get(self.model, id)

        self._lazy.debug(
            lambda: f"db.get: {self.model.__name__}({id}) -> {'found' if instance else 'not found'}"
        )
        return instance

    async def get_or_raise(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
    ) -> T:
        """Get entity by primary key or raise NotFoundError.

        Raises:
            NotFoundError: If entity doesn't exist
        """
        instance = await self.get(session, id)
        if instance is None:
            self._logger.info(
                "Entity not found",
                extra={
                    "entity": self.model.__name__,
                    "id": str(id),
                    "operation": "db.get_or_raise",
                },
            )
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def get_by(
        self,
        session: AsyncSession,
        attr: InstrumentedAttribute[Any],
        value: Any,
    ) -> T | None:
        """Get the first entity whose attribute equals value.

        Example:
            doc = await repo.get_by(session, GoogleDoc.google_doc_id, "abc")
        """
        stmt = select(self.model).where(attr == value).limit(1)
        result = await session.execute(stmt)
        instance = result.scalars().first()

        self._lazy.debug(
            lambda: f"db.get_by: {self.model.__name__}.{attr.key}={value!r} -> {'found' if instance else 'not found'}"
        )
        return instance

    async def find(
        self,
        session: AsyncSession,
        query: Mapping[str, Any] | None = None,
        *,
        order_by: Sequence[Any] | None = None,
        limit: int | None = None,
        include_deleted: bool = False,
    ) -> Sequence[T]:
        """Find entities matching a document-style predicate.

        Args:
            session: Database session
            query: Predicate, e.g. ``{"userId": user_id}``
            order_by: SQLAlchemy order expressions
            limit: Maximum results to return
            include_deleted: Skip the not-deleted clause

        Raises:
            InvalidFilterError: If the predicate cannot be compiled
        """
        predicate = dict(query or {}) if include_deleted else setup_filter(query)
        stmt = PredicateFilter(self.model, predicate).apply(select(self.model))
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.find: {self.model.__name__}(limit={limit}) -> {len(items)} items"
        )
        return items

    async def find_one(
        self,
        session: AsyncSession,
        query: Mapping[str, Any] | None = None,
        *,
        order_by: Sequence[Any] | None = None,
        include_deleted: bool = False,
    ) -> T | None:
        """Return the first entity matching the predicate, or None."""
        items = await self.find(
            session,
            query,
            order_by=order_by,
            limit=1,
            include_deleted=include_deleted,
        )
        return items[0] if items else None

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Persist a new entity.

        Adds to session, flushes to get generated values (like id),
        and refreshes to ensure instance is up-to-date.
        """
        session.add(instance)
        await session.flush()
        await session.refresh(instance)

        entity_id = getattr(instance, "id", None)
        self._lazy.debug(lambda: f"db.create: {self.model.__name__}(id={entity_id})")
        return instance

    async def update(
        self,
        session: AsyncSession,
        instance: T,
        values: Mapping[str, Any],
    ) -> T:
        """Assign attribute values to an entity and flush.

        Raises:
            InvalidFilterError: If a key is not a column of the model
        """
        for key, value in values.items():
            setattr(instance, resolve_column(self.model, key).key, value)
        await session.flush()
        await session.refresh(instance)

        entity_id = getattr(instance, "id", None)
        self._lazy.debug(
            lambda: f"db.update: {self.model.__name__}(id={entity_id}) fields={sorted(values)}"
        )
        return instance

    async def upsert(
        self,
        session: AsyncSession,
        match: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> tuple[T, bool]:
        """Update the entity matching ``match`` or create one.

        Soft-deleted rows count as matches, so re-storing revives nothing
        implicitly: ``values`` decides the ``deleted`` flag.

        Returns:
            ``(instance, created)``
        """
        existing = await self.find_one(session, match, include_deleted=True)
        if existing is not None:
            return await self.update(session, existing, values), False

        attributes = {
            resolve_column(self.model, key).key: value
            for key, value in {**match, **values}.items()
        }
        instance = self.model(**attributes)
        return await self.create(session, instance), True

    async def soft_delete(self, session: AsyncSession, instance: T) -> T:
        """Mark an entity deleted without removing the row."""
        cast("Any", instance).deleted = True
        await session.flush()

        entity_id = getattr(instance, "id", None)
        self._logger.info(
            "Entity soft deleted",
            extra={
                "entity": self.model.__name__,
                "id": str(entity_id),
                "operation": "db.soft_delete",
            },
        )
        return instance

    async def paginate(
        self,
        session: AsyncSession,
        options: PaginateOptions,
    ) -> Connection[T]:
        """Execute a keyset-paginated query.

        The total order is the requested sort field followed by the primary
        key, both in the requested direction. One extra row is fetched to
        detect whether more rows exist beyond the page.

        Args:
            session: Database session
            options: Normalized page request

        Returns:
            Connection[T] with edges in display order and page_info

        Raises:
            InvalidLimitError: If the limit is outside the allowed range
            InvalidCursorError: If a token is malformed or was issued for a
                different sort field
            InvalidFilterError: If the predicate or sort field is unknown
            sqlalchemy.exc.SQLAlchemyError: On storage failure

        Example:
            page = await repo.paginate(
                session,
                PaginateOptions(
                    query=setup_filter({"docId": "abc"}),
                    limit=20,
                    paginated_field="createdAt",
                    sort_ascending=True,
                    next=token,
                ),
            )
            for edge in page.edges:
                print(edge.node, edge.cursor)
        """
        settings = get_pagination_settings()
        limit = resolve_limit(
            options.limit,
            default_limit=settings.default_limit,
            max_limit=settings.max_limit,
        )

        if "." in options.paginated_field:
            msg = f"Cannot sort by nested field '{options.paginated_field}'"
            raise InvalidFilterError(msg, filter_name=options.paginated_field)
        sort_column = resolve_column(self.model, options.paginated_field)

        if options.previous:
            direction, token = CursorDirection.PREVIOUS, options.previous
        elif options.next:
            direction, token = CursorDirection.NEXT, options.next
        else:
            direction, token = CursorDirection.NONE, None

        keyset = KeysetFilter(
            sort_column,
            self._pk_attr(),
            ascending=options.sort_ascending,
            direction=direction,
            cursor=CursorCodec.decode(token) if token else None,
            limit=limit,
        )
        stmt = PredicateFilter(self.model, options.query).apply(select(self.model))
        stmt = keyset.apply(stmt)

        result = await session.execute(stmt)
        rows = list(result.scalars().all())

        # We fetched limit+1
        has_more = len(rows) > limit
        if has_more:
            rows = rows[:limit]

        if direction == CursorDirection.PREVIOUS:
            rows.reverse()

        sort_fields = keyset.sort_fields
        edges: list[Edge[T]] = [
            Edge(node=row, cursor=CursorCodec.create_cursor(row, sort_fields))
            for row in rows
        ]

        if direction == CursorDirection.PREVIOUS:
            has_previous, has_next = has_more, True
        elif direction == CursorDirection.NEXT:
            has_previous, has_next = True, has_more
        else:
            has_previous, has_next = False, has_more

        page_info = PageInfo(
            has_previous_page=has_previous,
            has_next_page=has_next,
            start_cursor=f"{PREVIOUS_PREFIX}{edges[0].cursor}" if edges else None,
            end_cursor=f"{NEXT_PREFIX}{edges[-1].cursor}" if edges else None,
        )

        self._lazy.debug(
            lambda: (
                f"db.paginate: {self.model.__name__}(limit={limit}, "
                f"sort={sort_column.key}, direction={direction.value}) -> "
                f"{len(edges)} items, has_next={has_next}, has_prev={has_previous}"
            )
        )
        return Connection(edges=edges, page_info=page_info)

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        """Primary key attribute of the model."""
        mapper = sa_inspect(self.model)
        return cast("InstrumentedAttribute[Any]", getattr(self.model, mapper.primary_key[0].key))


__all__ = ["BaseRepository"]
