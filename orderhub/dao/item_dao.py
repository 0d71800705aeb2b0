"""ItemDAO — items table operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.dao.base import BaseDAO, CursorPage
from orderhub.models.item import Item
from orderhub.query.params import QueryOptions
from orderhub.query.resources import ResourceConfig


class ItemDAO(BaseDAO[Item]):
    model = Item

    async def get_by_sku(self, session: AsyncSession, sku: str) -> Item | None:
        return await self.get_by_field(session, sku=sku)

    async def list_paginated(
        self,
        session: AsyncSession,
        options: QueryOptions,
        resource: ResourceConfig,
    ) -> CursorPage[Item]:
        """Keyset-paginated item list for the API."""
        return await self.paginate_cursor(session, select(Item), options, resource)
