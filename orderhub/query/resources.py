"""Per-resource query configuration: what may be sorted and filtered, and how.

Each :class:`ResourceConfig` is built once at import and never mutated.  A new
resource opts into the shared query engine by adding an entry to
:data:`RESOURCES`; the parser, builder and executors need no change.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from orderhub.models.item import Item
from orderhub.models.order import Order
from orderhub.models.user import User
from orderhub.query.params import DEFAULT_ORDERING, parse_ordering
from orderhub.query.predicates import ColumnRef


class FilterOp(str, enum.Enum):
    EQ = "eq"
    LIKE = "like"
    GTE = "gte"
    LTE = "lte"
    IN = "in"
    BETWEEN = "between"


@dataclass(frozen=True)
class FilterSpec:
    column: ColumnRef
    op: FilterOp


@dataclass(frozen=True)
class ResourceConfig:
    """Sortable / filterable fields of one resource.

    ``cursor_column`` must hold unique values; it breaks ties between rows
    with equal sort values in both pagination strategies.
    """

    name: str
    sort_config: Mapping[str, ColumnRef]
    filter_config: Mapping[str, FilterSpec]
    cursor_column: ColumnRef
    default_ordering: str = DEFAULT_ORDERING

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort_config", MappingProxyType(dict(self.sort_config)))
        object.__setattr__(self, "filter_config", MappingProxyType(dict(self.filter_config)))
        default = parse_ordering(self.default_ordering)
        if default is None or default.field not in self.sort_config:
            raise ValueError(
                f"resource {self.name!r}: default ordering {self.default_ordering!r} "
                "is not a sortable field"
            )


def filters(op: FilterOp, **columns: ColumnRef) -> dict[str, FilterSpec]:
    """Build several filter entries sharing one operator.

    Usage::

        filters(FilterOp.LIKE, name=User.name, email=User.email)
    """
    return {key: FilterSpec(column, op) for key, column in columns.items()}


def sortable(model: type, *names: str) -> dict[str, ColumnRef]:
    """Map logical sort names straight onto same-named model attributes."""
    return {name: getattr(model, name) for name in names}


USERS = ResourceConfig(
    name="users",
    sort_config=sortable(User, "id", "name", "email", "created_at", "updated_at"),
    filter_config=filters(FilterOp.LIKE, name=User.name, email=User.email),
    cursor_column=User.id,
    default_ordering="name",
)

# The orders list joins users, so user columns are sortable/filterable too.
ORDERS = ResourceConfig(
    name="orders",
    sort_config={
        **sortable(Order, "id", "total", "status", "created_at", "updated_at"),
        "user_name": User.name,
        "user_email": User.email,
    },
    filter_config={
        **filters(FilterOp.EQ, status=Order.status, user_id=Order.user_id),
        **filters(FilterOp.IN, status_in=Order.status),
        **filters(FilterOp.GTE, min_total=Order.total),
        **filters(FilterOp.LTE, max_total=Order.total),
        **filters(FilterOp.BETWEEN, total_between=Order.total),
        **filters(FilterOp.LIKE, user_name=User.name, user_email=User.email),
    },
    cursor_column=Order.id,
    default_ordering="-created_at",
)

ITEMS = ResourceConfig(
    name="items",
    sort_config=sortable(Item, "id", "name", "price", "created_at"),
    filter_config={
        **filters(FilterOp.LIKE, name=Item.name),
        **filters(FilterOp.EQ, sku=Item.sku),
        **filters(FilterOp.GTE, min_price=Item.price),
        **filters(FilterOp.LTE, max_price=Item.price),
        **filters(FilterOp.BETWEEN, price_between=Item.price),
    },
    cursor_column=Item.id,
)

RESOURCES: Mapping[str, ResourceConfig] = MappingProxyType(
    {cfg.name: cfg for cfg in (USERS, ORDERS, ITEMS)}
)
