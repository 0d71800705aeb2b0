"""Query-string parsing — turns raw request parameters into ``QueryOptions``.

Parsing is lenient by contract: malformed numbers fall back to defaults,
out-of-range values are clamped, and nothing here ever raises.  The result is
a frozen value owned by one request.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

PAGE_SIZE_MIN = 1
PAGE_SIZE_MAX = 100
PAGE_SIZE_DEFAULT = 20
CURSOR_PAGE_SIZE_DEFAULT = 10
# Highest page whose OFFSET still fits a signed 64-bit bind at the largest limit.
PAGE_NUMBER_MAX = (2**63 - 1) // PAGE_SIZE_MAX + 1
DEFAULT_ORDERING = "-created_at"

PAGE_RESERVED_KEYS = frozenset({"from_page", "to_page", "limit", "ordering"})
CURSOR_RESERVED_KEYS = frozenset({"limit", "cursor", "sortBy", "order", "direction"})

Scalar = Union[str, int, float]
FilterValue = Union[Scalar, tuple[Scalar, ...]]


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class Traversal(str, enum.Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class Ordering:
    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


@dataclass(frozen=True)
class PageWindow:
    """Page-based window; ``to_page`` is informational only."""

    from_page: int = 1
    to_page: int = 1
    limit: int = PAGE_SIZE_DEFAULT

    @property
    def offset(self) -> int:
        return (self.from_page - 1) * self.limit


@dataclass(frozen=True)
class CursorWindow:
    cursor: str | None = None
    limit: int = CURSOR_PAGE_SIZE_DEFAULT
    direction: Traversal = Traversal.FORWARD


@dataclass(frozen=True)
class QueryOptions:
    """Parsed description of one list request."""

    pagination: PageWindow | CursorWindow = field(default_factory=PageWindow)
    ordering: Ordering | None = None
    filters: Mapping[str, FilterValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the filter mapping so options can't be mutated after parsing.
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))


# ── scalar helpers ────────────────────────────────────────────────────────


def _to_int(raw: Any, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def clamp_limit(raw: Any, default: int = PAGE_SIZE_DEFAULT) -> int:
    """Parse *raw* as a page size and clamp it into ``[PAGE_SIZE_MIN, PAGE_SIZE_MAX]``."""
    limit = _to_int(raw, default)
    return max(PAGE_SIZE_MIN, min(limit, PAGE_SIZE_MAX))


def _clamp_page(page: int, floor: int) -> int:
    return max(floor, min(page, PAGE_NUMBER_MAX))


def coerce_value(raw: str) -> Scalar:
    """Return *raw* as int or float when it parses cleanly as a number, else unchanged.

    The coerced type later decides which filter operators apply to the value.
    """
    text = raw.strip()
    if not text or "_" in text:
        return raw
    try:
        number = int(text)
    except ValueError:
        pass
    else:
        # "007" stays text so codes and SKUs survive the round-trip
        return number if str(number) == text else raw
    try:
        real = float(text)
    except ValueError:
        return raw
    if math.isnan(real) or math.isinf(real):
        return raw
    return real


def parse_ordering(raw: str | None) -> Ordering | None:
    """``"-created_at"`` → ``Ordering("created_at", DESC)``; blank → None."""
    if raw is None:
        return None
    text = raw.strip()
    if text.startswith("-"):
        name = text[1:].strip()
        return Ordering(name, SortDirection.DESC) if name else None
    return Ordering(text) if text else None


def _items(params: Any) -> list[tuple[str, str]]:
    """Flatten a query-string multi-map into (key, value) pairs, keeping repeats."""
    if hasattr(params, "multi_items"):
        return list(params.multi_items())
    if isinstance(params, Mapping):
        pairs: list[tuple[str, str]] = []
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                pairs.extend((key, str(v)) for v in value)
            else:
                pairs.append((key, str(value)))
        return pairs
    return [(str(k), str(v)) for k, v in params]


def _first(pairs: list[tuple[str, str]], key: str) -> str | None:
    for k, v in pairs:
        if k == key:
            return v
    return None


def extract_filters(
    pairs: list[tuple[str, str]], reserved: frozenset[str]
) -> dict[str, FilterValue]:
    """Collect every non-reserved key as a filter.

    A key seen once yields a scalar; a repeated key yields a tuple of values,
    which is what the ``in`` and ``between`` operators expect.  Empty values
    are dropped.
    """
    grouped: dict[str, list[Scalar]] = {}
    for key, value in pairs:
        if key in reserved or value is None or value.strip() == "":
            continue
        grouped.setdefault(key, []).append(coerce_value(value))
    return {
        key: values[0] if len(values) == 1 else tuple(values)
        for key, values in grouped.items()
    }


# ── public parsers ────────────────────────────────────────────────────────


def parse_page_params(params: Any, *, default_limit: int = PAGE_SIZE_DEFAULT) -> QueryOptions:
    """Parse ``from_page`` / ``to_page`` / ``limit`` / ``ordering`` plus ad-hoc filters."""
    pairs = _items(params)
    from_page = _clamp_page(_to_int(_first(pairs, "from_page"), 1), 1)
    to_page = _clamp_page(_to_int(_first(pairs, "to_page"), from_page), from_page)
    window = PageWindow(
        from_page=from_page,
        to_page=to_page,
        limit=clamp_limit(_first(pairs, "limit"), default_limit),
    )
    return QueryOptions(
        pagination=window,
        ordering=parse_ordering(_first(pairs, "ordering")),
        filters=extract_filters(pairs, PAGE_RESERVED_KEYS),
    )


def parse_cursor_params(
    params: Any, *, default_limit: int = CURSOR_PAGE_SIZE_DEFAULT
) -> QueryOptions:
    """Parse ``limit`` / ``cursor`` / ``sortBy`` / ``order`` / ``direction`` plus filters."""
    pairs = _items(params)
    cursor = (_first(pairs, "cursor") or "").strip() or None
    direction = (
        Traversal.BACKWARD
        if (_first(pairs, "direction") or "").strip().lower() == Traversal.BACKWARD.value
        else Traversal.FORWARD
    )
    window = CursorWindow(
        cursor=cursor,
        limit=clamp_limit(_first(pairs, "limit"), default_limit),
        direction=direction,
    )

    ordering = None
    sort_by = (_first(pairs, "sortBy") or "").strip()
    if sort_by:
        order = (_first(pairs, "order") or "").strip().lower()
        ordering = Ordering(
            sort_by,
            SortDirection.DESC if order == SortDirection.DESC.value else SortDirection.ASC,
        )

    return QueryOptions(
        pagination=window,
        ordering=ordering,
        filters=extract_filters(pairs, CURSOR_RESERVED_KEYS),
    )
