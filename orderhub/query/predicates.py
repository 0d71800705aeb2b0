"""Filter predicates — a closed set of comparison nodes over opaque column refs.

The query builder produces these; :func:`to_clause` is the only place that
turns them into SQLAlchemy expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Union

import structlog
from sqlalchemy import Select, and_
from sqlalchemy.sql.elements import ColumnElement

log = structlog.get_logger(__name__)

# A column expression handed over by a ResourceConfig.  The builder never
# looks inside it; only to_clause() does.
ColumnRef = Any


@dataclass(frozen=True)
class Eq:
    column: ColumnRef
    value: Any


@dataclass(frozen=True)
class Like:
    column: ColumnRef
    value: str


@dataclass(frozen=True)
class Gte:
    column: ColumnRef
    value: Any


@dataclass(frozen=True)
class Lte:
    column: ColumnRef
    value: Any


@dataclass(frozen=True)
class In:
    column: ColumnRef
    values: tuple[Any, ...]


@dataclass(frozen=True)
class Between:
    column: ColumnRef
    low: Any
    high: Any


Predicate = Union[Eq, Like, Gte, Lte, In, Between]

_NUMERIC_TYPES = (int, float, Decimal)
LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Make ``%`` and ``_`` in *value* match literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class ValueMismatchError(ValueError):
    """A filter value cannot be compared against its column."""


def _python_type(column: ColumnRef) -> type | None:
    try:
        return column.type.python_type
    except (AttributeError, NotImplementedError):
        return None


def _adapt(column: ColumnRef, value: Any) -> Any:
    """Bring a query-string value in line with the column type.

    Query-string coercion turns ``"42"`` into ``42``; a text column still
    needs ``"42"``.  Numeric columns get ``Decimal`` so comparisons stay exact.
    """
    python_type = _python_type(column)
    if python_type is str and not isinstance(value, str):
        return str(value)
    if python_type in _NUMERIC_TYPES and isinstance(value, str):
        raise ValueMismatchError(f"{value!r} is not numeric")
    if python_type is Decimal and isinstance(value, float):
        return Decimal(str(value))
    return value


def to_clause(predicate: Predicate) -> ColumnElement[bool]:
    """Render one predicate as a SQLAlchemy boolean expression."""
    col = predicate.column
    if isinstance(predicate, Eq):
        return col == _adapt(col, predicate.value)
    if isinstance(predicate, Like):
        return col.ilike(f"%{escape_like(predicate.value)}%", escape=LIKE_ESCAPE)
    if isinstance(predicate, Gte):
        return col >= _adapt(col, predicate.value)
    if isinstance(predicate, Lte):
        return col <= _adapt(col, predicate.value)
    if isinstance(predicate, In):
        return col.in_([_adapt(col, v) for v in predicate.values])
    if isinstance(predicate, Between):
        return col.between(_adapt(col, predicate.low), _adapt(col, predicate.high))
    raise TypeError(f"unsupported predicate: {predicate!r}")


def apply_predicates(stmt: Select, predicates: list[Predicate]) -> Select:
    """AND every predicate onto *stmt*.

    A predicate whose value does not fit its column type is left out rather
    than sent to the database.
    """
    clauses = []
    for predicate in predicates:
        try:
            clauses.append(to_clause(predicate))
        except ValueMismatchError as exc:
            log.debug("query.filter_skipped", predicate=type(predicate).__name__, reason=str(exc))
    if not clauses:
        return stmt
    return stmt.where(and_(*clauses))
