"""ItemService — catalogue items."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.dao.base import CursorPage
from orderhub.dao.item_dao import ItemDAO
from orderhub.models.item import Item
from orderhub.query.params import QueryOptions
from orderhub.query.resources import ResourceConfig
from orderhub.services import ConflictError, NotFoundError, ValidationError


class ItemService:
    def __init__(self, item_dao: ItemDAO, resource: ResourceConfig) -> None:
        self._item_dao = item_dao
        self._resource = resource

    async def list(self, session: AsyncSession, options: QueryOptions) -> CursorPage[Item]:
        """Return one keyset page of items."""
        return await self._item_dao.list_paginated(session, options, self._resource)

    async def get(self, session: AsyncSession, item_id: str) -> Item:
        item = await self._item_dao.get_by_id(session, item_id)
        if item is None:
            raise NotFoundError("item not found")
        return item

    async def create(
        self,
        session: AsyncSession,
        *,
        name: str,
        price: Decimal,
        description: str | None = None,
        sku: str | None = None,
    ) -> Item:
        if price <= 0:
            raise ValidationError("price must be positive")
        if sku is not None and await self._item_dao.get_by_sku(session, sku) is not None:
            raise ConflictError(f"item with sku '{sku}' already exists")
        return await self._item_dao.create(
            session, name=name, price=price, description=description, sku=sku
        )
