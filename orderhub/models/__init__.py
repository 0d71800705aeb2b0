"""SQLAlchemy ORM models — one file per table."""

from orderhub.models.item import Item
from orderhub.models.order import Order, OrderStatus
from orderhub.models.user import User

__all__ = [
    "User",
    "Order",
    "OrderStatus",
    "Item",
]
