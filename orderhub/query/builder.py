"""Query builder — filters, ordering and windows on top of a base SELECT.

Every derived statement (row fetch and row count) is built from the same
filtered statement, so ``total`` always counts exactly the rows ``data`` is
paged from.  Unknown filter keys, unknown sort fields and operator/value
mismatches are dropped, never raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import Select, func, select, tuple_

from orderhub.query.cursor import Cursor, InvalidCursorError, decode_cursor
from orderhub.query.params import (
    CursorWindow,
    FilterValue,
    Ordering,
    PageWindow,
    QueryOptions,
    SortDirection,
    Traversal,
    parse_ordering,
)
from orderhub.query.predicates import (
    Between,
    ColumnRef,
    Eq,
    Gte,
    In,
    Like,
    Lte,
    Predicate,
    apply_predicates,
)
from orderhub.query.resources import FilterOp, FilterSpec, ResourceConfig

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolvedOrdering:
    field: str
    column: ColumnRef
    direction: SortDirection

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


@dataclass(frozen=True)
class PageQuery:
    """Row and count statements for one page-based request."""

    rows: Select
    count: Select
    window: PageWindow
    ordering: ResolvedOrdering


@dataclass(frozen=True)
class CursorQuery:
    """Row statement fetching ``limit + 1`` rows past the cursor."""

    rows: Select
    window: CursorWindow
    ordering: ResolvedOrdering
    key_column: ColumnRef
    after: Cursor | None


# ── filters ──────────────────────────────────────────────────────────────


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _predicate(spec: FilterSpec, value: FilterValue) -> Predicate | None:
    col, op = spec.column, spec.op
    is_list = isinstance(value, (list, tuple))
    if op is FilterOp.EQ:
        return None if is_list else Eq(col, value)
    if op is FilterOp.LIKE:
        return None if is_list else Like(col, str(value))
    if op is FilterOp.GTE:
        return Gte(col, value) if _is_number(value) else None
    if op is FilterOp.LTE:
        return Lte(col, value) if _is_number(value) else None
    if op is FilterOp.IN:
        return In(col, tuple(value)) if is_list and value else None
    if op is FilterOp.BETWEEN:
        if is_list and len(value) == 2:
            return Between(col, value[0], value[1])
        return None
    return None


def build_predicates(
    filters: Mapping[str, FilterValue], resource: ResourceConfig
) -> list[Predicate]:
    """Translate request filters into predicates using the resource's filter config."""
    predicates: list[Predicate] = []
    for key, value in filters.items():
        spec = resource.filter_config.get(key)
        if spec is None:
            log.debug("query.filter_unknown", resource=resource.name, key=key)
            continue
        predicate = _predicate(spec, value)
        if predicate is None:
            log.debug(
                "query.filter_skipped", resource=resource.name, key=key, op=spec.op.value
            )
            continue
        predicates.append(predicate)
    return predicates


# ── ordering ─────────────────────────────────────────────────────────────


def resolve_ordering(ordering: Ordering | None, resource: ResourceConfig) -> ResolvedOrdering:
    """Pick the requested sort field if it is sortable, else the resource default."""
    if ordering is None or ordering.field not in resource.sort_config:
        if ordering is not None:
            log.debug("query.sort_unknown", resource=resource.name, field=ordering.field)
        # validated at config construction, never None here
        ordering = parse_ordering(resource.default_ordering)
    return ResolvedOrdering(
        field=ordering.field,
        column=resource.sort_config[ordering.field],
        direction=ordering.direction,
    )


def _order_by(stmt: Select, columns: list[ColumnRef], descending: bool) -> Select:
    return stmt.order_by(*(c.desc() if descending else c.asc() for c in columns))


def _sort_columns(resolved: ResolvedOrdering, resource: ResourceConfig) -> list[ColumnRef]:
    if resolved.column is resource.cursor_column:
        return [resolved.column]
    return [resolved.column, resource.cursor_column]


# ── builders ─────────────────────────────────────────────────────────────


def apply_filters(base: Select, options: QueryOptions, resource: ResourceConfig) -> Select:
    return apply_predicates(base, build_predicates(options.filters, resource))


def count_query(filtered: Select) -> Select:
    """``SELECT count(*)`` over *filtered*, ignoring any ORDER BY / LIMIT on it."""
    inner = filtered.order_by(None).limit(None).offset(None)
    return select(func.count()).select_from(inner.subquery())


def build_page_query(
    base: Select, options: QueryOptions, resource: ResourceConfig
) -> PageQuery:
    """Build the page-based row and count statements from one filtered base."""
    window = options.pagination
    if not isinstance(window, PageWindow):
        raise TypeError("build_page_query() needs page-based QueryOptions")

    filtered = apply_filters(base, options, resource)
    resolved = resolve_ordering(options.ordering, resource)
    # the key column keeps rows with equal sort values in a stable order
    rows = _order_by(filtered, _sort_columns(resolved, resource), resolved.descending)
    rows = rows.limit(window.limit).offset(window.offset)
    return PageQuery(
        rows=rows,
        count=count_query(filtered),
        window=window,
        ordering=resolved,
    )


def _decode_after(
    token: str | None, resolved: ResolvedOrdering, resource: ResourceConfig
) -> Cursor | None:
    if not token:
        return None
    try:
        cursor = decode_cursor(token)
    except InvalidCursorError as exc:
        log.warning("query.cursor_rejected", resource=resource.name, reason=str(exc))
        return None
    if cursor.field != resolved.field:
        log.warning(
            "query.cursor_rejected",
            resource=resource.name,
            reason=f"cursor sorts by {cursor.field!r}, request sorts by {resolved.field!r}",
        )
        return None
    return cursor


def build_cursor_query(
    base: Select, options: QueryOptions, resource: ResourceConfig
) -> CursorQuery:
    """Build a keyset statement fetching one row more than the window limit.

    Rows are keyed by ``(sort column, cursor column)``.  Moving backward flips
    both the comparison and the ORDER BY; the executor restores display order.
    """
    window = options.pagination
    if not isinstance(window, CursorWindow):
        raise TypeError("build_cursor_query() needs cursor-based QueryOptions")

    filtered = apply_filters(base, options, resource)
    resolved = resolve_ordering(options.ordering, resource)
    after = _decode_after(window.cursor, resolved, resource)

    # effective scan direction: sort direction, flipped when walking backward
    descending = resolved.descending != (window.direction is Traversal.BACKWARD)
    columns = _sort_columns(resolved, resource)

    stmt = filtered
    if after is not None:
        if len(columns) == 1:
            key, bound = columns[0], after.key
        else:
            key, bound = tuple_(*columns), tuple_(after.value, after.key)
        stmt = stmt.where(key < bound if descending else key > bound)

    stmt = _order_by(stmt, columns, descending).limit(window.limit + 1)
    return CursorQuery(
        rows=stmt,
        window=window,
        ordering=resolved,
        key_column=resource.cursor_column,
        after=after,
    )
