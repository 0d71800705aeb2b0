"""orders table."""

import enum
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, Numeric, String, desc
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderhub.core.database import Base, TimestampMixin
from orderhub.models.user import User, new_id


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # [{"product_id", "product_name", "quantity", "price"}, ...]
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=OrderStatus.PENDING.value
    )
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    user: Mapped[User] = relationship(lazy="raise")

    __table_args__ = (
        Index("idx_orders_cursor", desc("created_at"), desc("id")),
        Index("idx_orders_user_id", "user_id"),
    )
