"""OrderService — order placement, status lifecycle and discounts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.dao.base import OffsetPage
from orderhub.dao.order_dao import OrderDAO
from orderhub.dao.user_dao import UserDAO
from orderhub.models.order import Order, OrderStatus
from orderhub.query.params import QueryOptions
from orderhub.query.resources import ResourceConfig
from orderhub.services import ConflictError, NotFoundError, ValidationError

log = structlog.get_logger(__name__)

# Order status valid transitions (one step per action).
_VALID_TRANSITIONS: dict[str, str] = {
    OrderStatus.PENDING.value: OrderStatus.CONFIRMED.value,
    OrderStatus.CONFIRMED.value: OrderStatus.SHIPPED.value,
}

# (threshold, rate), checked from the highest threshold down.
_DISCOUNT_TIERS: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("1000"), Decimal("0.10")),
    (Decimal("500"), Decimal("0.05")),
)

_CENT = Decimal("0.01")


def validate_line_items(items: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Check and normalise order line items.

    Each item needs a non-blank ``product_id`` and ``product_name``, an integer
    ``quantity`` > 0 and a ``price`` > 0.  Prices are stored as decimal strings
    so the JSON column keeps them exact.

    Raises :class:`ValidationError` on the first bad item.
    """
    normalised: list[dict[str, Any]] = []
    for index, item in enumerate(items):
        product_id = str(item.get("product_id") or "").strip()
        product_name = str(item.get("product_name") or "").strip()
        if not product_id or not product_name:
            raise ValidationError(f"item {index}: product_id and product_name are required")
        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(f"item {index}: quantity must be a positive integer")
        try:
            price = Decimal(str(item.get("price")))
        except ArithmeticError:
            raise ValidationError(f"item {index}: price must be a number") from None
        if not price.is_finite() or price <= 0:
            raise ValidationError(f"item {index}: price must be positive")
        normalised.append(
            {
                "product_id": product_id,
                "product_name": product_name,
                "quantity": quantity,
                "price": str(price.quantize(_CENT, ROUND_HALF_UP)),
            }
        )
    if not normalised:
        raise ValidationError("an order needs at least one item")
    return normalised


def order_total(items: Iterable[Mapping[str, Any]]) -> Decimal:
    """Σ price × quantity, rounded to cents."""
    total = sum((Decimal(str(i["price"])) * i["quantity"] for i in items), Decimal("0"))
    return total.quantize(_CENT, ROUND_HALF_UP)


def calculate_discount(total: Decimal) -> Decimal:
    """10 % over 1000, 5 % over 500, nothing otherwise."""
    for threshold, rate in _DISCOUNT_TIERS:
        if total > threshold:
            return (total * rate).quantize(_CENT, ROUND_HALF_UP)
    return Decimal("0.00")


class OrderService:
    """Stateless service for orders and their status lifecycle."""

    def __init__(self, order_dao: OrderDAO, user_dao: UserDAO, resource: ResourceConfig) -> None:
        self._order_dao = order_dao
        self._user_dao = user_dao
        self._resource = resource

    # ── reads ─────────────────────────────────────────────────────────────

    async def list(self, session: AsyncSession, options: QueryOptions) -> OffsetPage[Order]:
        """Return one page of orders, each with its user loaded."""
        return await self._order_dao.list_with_users(session, options, self._resource)

    async def get(self, session: AsyncSession, order_id: str) -> Order:
        """Raises :class:`NotFoundError` if the order does not exist."""
        order = await self._order_dao.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("order not found")
        return order

    async def list_by_user(self, session: AsyncSession, user_id: str) -> list[Order]:
        await self._require_user(session, user_id)
        return await self._order_dao.list_by_user(session, user_id)

    async def list_by_user_paginated(
        self, session: AsyncSession, user_id: str, options: QueryOptions
    ) -> OffsetPage[Order]:
        await self._require_user(session, user_id)
        return await self._order_dao.list_for_user_paginated(
            session, user_id, options, self._resource
        )

    async def discount(self, session: AsyncSession, order_id: str) -> dict:
        """Return the order's discount and discounted total."""
        order = await self.get(session, order_id)
        total = Decimal(order.total)
        discount = calculate_discount(total)
        return {
            "order_id": order.id,
            "total": total,
            "discount": discount,
            "final_total": total - discount,
        }

    # ── writes ────────────────────────────────────────────────────────────

    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        items: Iterable[Mapping[str, Any]],
    ) -> Order:
        """Place a ``pending`` order for an existing user.

        Raises :class:`NotFoundError` if the user does not exist.
        Raises :class:`ValidationError` on bad line items.
        """
        line_items = validate_line_items(items)
        await self._require_user(session, user_id)
        order = await self._order_dao.create(
            session,
            user_id=user_id,
            items=line_items,
            status=OrderStatus.PENDING.value,
            total=order_total(line_items),
        )
        log.info("order.created", order_id=order.id, user_id=user_id, total=str(order.total))
        return order

    async def confirm(self, session: AsyncSession, order_id: str) -> Order:
        return await self._advance(session, order_id, OrderStatus.CONFIRMED)

    async def ship(self, session: AsyncSession, order_id: str) -> Order:
        return await self._advance(session, order_id, OrderStatus.SHIPPED)

    # ── helpers ───────────────────────────────────────────────────────────

    async def _require_user(self, session: AsyncSession, user_id: str) -> None:
        if not await self._user_dao.exists(session, user_id):
            raise NotFoundError("user not found")

    async def _advance(self, session: AsyncSession, order_id: str, target: OrderStatus) -> Order:
        """Move an order one step along its lifecycle.

        Raises :class:`NotFoundError` if the order does not exist.
        Raises :class:`ConflictError` if *target* is not the next status.
        """
        order = await self.get(session, order_id)
        if _VALID_TRANSITIONS.get(order.status) != target.value:
            raise ConflictError(f"cannot move order from '{order.status}' to '{target.value}'")
        updated = await self._order_dao.update(session, order_id, status=target.value)
        if updated is None:
            raise NotFoundError("order not found")
        log.info("order.status_changed", order_id=order_id, status=target.value)
        return updated
