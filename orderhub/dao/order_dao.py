"""OrderDAO — orders table operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from orderhub.dao.base import BaseDAO, OffsetPage
from orderhub.models.order import Order
from orderhub.models.user import User
from orderhub.query.params import QueryOptions
from orderhub.query.resources import ResourceConfig


class OrderDAO(BaseDAO[Order]):
    model = Order

    @staticmethod
    def _with_users():
        # JOIN so user_name / user_email can be filtered and sorted on
        return select(Order).join(User, Order.user_id == User.id)

    async def list_with_users(
        self,
        session: AsyncSession,
        options: QueryOptions,
        resource: ResourceConfig,
    ) -> OffsetPage[Order]:
        """Page-based order list with each order's user loaded."""
        return await self.paginate_pages(
            session, self._with_users(), options, resource, load=[selectinload(Order.user)]
        )

    async def list_for_user_paginated(
        self,
        session: AsyncSession,
        user_id: str,
        options: QueryOptions,
        resource: ResourceConfig,
    ) -> OffsetPage[Order]:
        """Page-based list scoped to one user; the scope applies to count and rows."""
        query = self._with_users().where(Order.user_id == user_id)
        return await self.paginate_pages(session, query, options, resource)

    async def list_by_user(self, session: AsyncSession, user_id: str) -> list[Order]:
        """All orders of one user, newest first (no pagination)."""
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
