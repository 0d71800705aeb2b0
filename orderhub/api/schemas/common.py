"""Shared pagination schemas — the ``{data, pagination}`` list envelope."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel

from orderhub.dao.base import CursorPage, OffsetPage

T = TypeVar("T")


class PagePagination(BaseModel):
    """Metadata for page-based listings."""

    from_page: int
    to_page: int
    limit: int
    total: int
    has_next_page: bool
    has_prev_page: bool


class CursorPagination(BaseModel):
    """Metadata for keyset listings (no total)."""

    limit: int
    next_cursor: str | None
    prev_cursor: str | None
    has_next_page: bool
    has_prev_page: bool


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated list response."""

    data: list[T]
    pagination: Union[PagePagination, CursorPagination]


def page_response(
    page: OffsetPage[Any], item: Callable[[Any], T]
) -> PaginatedResponse[T]:
    """Wrap an :class:`OffsetPage`, converting each row with *item*."""
    page = page.map(item)
    return PaginatedResponse(
        data=page.data,
        pagination=PagePagination(
            from_page=page.from_page,
            to_page=page.to_page,
            limit=page.limit,
            total=page.total,
            has_next_page=page.has_next_page,
            has_prev_page=page.has_prev_page,
        ),
    )


def cursor_response(
    page: CursorPage[Any], item: Callable[[Any], T]
) -> PaginatedResponse[T]:
    """Wrap a :class:`CursorPage`, converting each row with *item*."""
    page = page.map(item)
    return PaginatedResponse(
        data=page.data,
        pagination=CursorPagination(
            limit=page.limit,
            next_cursor=page.next_cursor,
            prev_cursor=page.prev_cursor,
            has_next_page=page.has_next_page,
            has_prev_page=page.has_prev_page,
        ),
    )
