"""Generic base DAO — CRUD (ORM) + page-based and cursor pagination (Core)."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy import exists as sa_exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import ORMOption

from orderhub.core.database import Base
from orderhub.query.builder import build_cursor_query, build_page_query
from orderhub.query.cursor import encode_cursor
from orderhub.query.params import QueryOptions, Traversal
from orderhub.query.resources import ResourceConfig

ModelT = TypeVar("ModelT", bound=Base)
T = TypeVar("T")
U = TypeVar("U")


@dataclass
class OffsetPage(Generic[T]):
    """One page of a page-based listing.

    ``total`` counts every row matching the filters, independent of the window.
    """

    data: list[T]
    from_page: int
    to_page: int
    limit: int
    total: int
    has_next_page: bool
    has_prev_page: bool

    def map(self, fn: Callable[[T], U]) -> OffsetPage[U]:
        return replace(self, data=[fn(row) for row in self.data])  # type: ignore[return-value]


@dataclass
class CursorPage(Generic[T]):
    """One page of a keyset listing (no total count)."""

    data: list[T]
    limit: int
    next_cursor: str | None
    prev_cursor: str | None
    has_next_page: bool
    has_prev_page: bool

    def map(self, fn: Callable[[T], U]) -> CursorPage[U]:
        return replace(self, data=[fn(row) for row in self.data])  # type: ignore[return-value]


class BaseDAO(Generic[ModelT]):
    """Base data-access object. Subclasses set ``model`` class attribute."""

    model: type[ModelT]

    # ── ORM methods ──────────────────────────────────────────────────────

    @staticmethod
    def _require_pk(pk: str) -> None:
        """Raise ValueError if *pk* is None or blank."""
        if pk is None or not str(pk).strip():
            raise ValueError("pk must not be empty")

    async def get_by_id(self, session: AsyncSession, pk: str) -> ModelT | None:
        self._require_pk(pk)
        return await session.get(self.model, pk)

    async def create(self, session: AsyncSession, **values: Any) -> ModelT:
        obj = self.model(**values)
        session.add(obj)
        await session.flush()
        await session.refresh(obj)
        return obj

    async def update(self, session: AsyncSession, pk: str, **values: Any) -> ModelT | None:
        self._require_pk(pk)
        obj = await session.get(self.model, pk)
        if obj is None:
            return None
        immutable = {"id", "created_at", "updated_at"}
        column_keys = set(self.model.__mapper__.column_attrs.keys())
        for key in values:
            if key in immutable:
                raise AttributeError(f"'{key}' is immutable and cannot be updated")
            if key not in column_keys:
                raise AttributeError(f"{self.model.__name__} has no column '{key}'")
        for key, val in values.items():
            setattr(obj, key, val)
        await session.flush()
        await session.refresh(obj)
        return obj

    async def delete(self, session: AsyncSession, pk: str) -> bool:
        self._require_pk(pk)
        obj = await session.get(self.model, pk)
        if obj is None:
            return False
        await session.delete(obj)
        await session.flush()
        return True

    async def exists(self, session: AsyncSession, pk: str) -> bool:
        """Check existence without loading the full ORM object."""
        self._require_pk(pk)
        table = self.model.__table__
        stmt = select(sa_exists().where(table.c.id == pk))
        result = await session.execute(stmt)
        return result.scalar_one()

    async def get_by_field(self, session: AsyncSession, **filters: Any) -> ModelT | None:
        """Return the first row matching all *filters*, or None.

        Usage::

            user = await dao.get_by_field(session, email="alice@example.com")

        Raises ``ValueError`` if called without any filters.
        """
        if not filters:
            raise ValueError("get_by_field() requires at least one filter")
        stmt = select(self.model)
        for key, val in filters.items():
            stmt = stmt.where(getattr(self.model, key) == val)
        result = await session.execute(stmt)
        return result.scalars().first()

    # ── Core methods ─────────────────────────────────────────────────────

    async def paginate_pages(
        self,
        session: AsyncSession,
        query: Select,
        options: QueryOptions,
        resource: ResourceConfig,
        load: Sequence[ORMOption] = (),
    ) -> OffsetPage[ModelT]:
        """Run a page-based listing of *query* (unfiltered, unsorted).

        Filters and ordering come from *options* checked against *resource*;
        *load* holds loader options applied to the row fetch only.  Count and
        fetch are two statements outside any shared snapshot, so under
        concurrent writes ``total`` may drift from ``data``.
        """
        built = build_page_query(query, options, resource)
        window = built.window

        total = (await session.execute(built.count)).scalar_one()

        rows_stmt = built.rows.options(*load) if load else built.rows
        result = await session.execute(rows_stmt)
        data = list(result.scalars().all())

        return OffsetPage(
            data=data,
            from_page=window.from_page,
            to_page=window.to_page,
            limit=window.limit,
            total=total,
            has_next_page=window.offset + len(data) < total,
            has_prev_page=window.from_page > 1,
        )

    async def paginate_cursor(
        self,
        session: AsyncSession,
        query: Select,
        options: QueryOptions,
        resource: ResourceConfig,
        load: Sequence[ORMOption] = (),
    ) -> CursorPage[ModelT]:
        """Run a keyset listing of *query* without counting rows.

        Fetches ``limit + 1`` rows; the extra row only signals that more data
        exists in the traversal direction and is never returned.  A cursor is
        issued for a side only when a page provably exists on that side.
        """
        built = build_cursor_query(query, options, resource)
        window = built.window

        stmt = built.rows.add_columns(
            built.ordering.column.label("_cursor_value"),
            built.key_column.label("_cursor_key"),
        )
        if load:
            stmt = stmt.options(*load)
        result = await session.execute(stmt)
        rows = list(result.all())

        has_more = len(rows) > window.limit
        rows = rows[: window.limit]
        if window.direction is Traversal.BACKWARD:
            rows.reverse()
            has_next, has_prev = built.after is not None, has_more
        else:
            has_next, has_prev = has_more, built.after is not None

        def _cursor(row: Any) -> str:
            return encode_cursor(built.ordering.field, row[-2], row[-1])

        return CursorPage(
            data=[row[0] for row in rows],
            limit=window.limit,
            next_cursor=_cursor(rows[-1]) if has_next and rows else None,
            prev_cursor=_cursor(rows[0]) if has_prev and rows else None,
            has_next_page=has_next,
            has_prev_page=has_prev,
        )
