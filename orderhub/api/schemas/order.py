"""Order request/response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from orderhub.api.schemas.user import UserResponse


class LineItem(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    price: Decimal


class CreateOrderRequest(BaseModel):
    user_id: str
    items: list[LineItem] = Field(min_length=1)


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    items: list[LineItem]
    status: str
    total: Decimal
    created_at: datetime
    updated_at: datetime


class OrderWithUser(OrderResponse):
    """Order joined with the user who placed it (list view)."""

    user: UserResponse


class OrderDiscount(BaseModel):
    order_id: str
    total: Decimal
    discount: Decimal
    final_total: Decimal
