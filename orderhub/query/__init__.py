"""Generic list-query engine: parse → build → paginate.

Request parameters are parsed into :class:`QueryOptions`
(:mod:`orderhub.query.params`), checked against a resource's
:class:`ResourceConfig` (:mod:`orderhub.query.resources`) and turned into
SQLAlchemy statements (:mod:`orderhub.query.builder`).  Execution lives in
:class:`orderhub.dao.base.BaseDAO`.
"""

from orderhub.query.params import (
    CursorWindow,
    Ordering,
    PageWindow,
    QueryOptions,
    SortDirection,
    Traversal,
    parse_cursor_params,
    parse_page_params,
)
from orderhub.query.resources import RESOURCES, FilterOp, FilterSpec, ResourceConfig

__all__ = [
    "CursorWindow",
    "FilterOp",
    "FilterSpec",
    "Ordering",
    "PageWindow",
    "QueryOptions",
    "RESOURCES",
    "ResourceConfig",
    "SortDirection",
    "Traversal",
    "parse_cursor_params",
    "parse_page_params",
]
