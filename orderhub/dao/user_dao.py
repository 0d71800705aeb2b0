"""UserDAO — users table operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.dao.base import BaseDAO, OffsetPage
from orderhub.models.user import User
from orderhub.query.params import QueryOptions
from orderhub.query.resources import ResourceConfig


class UserDAO(BaseDAO[User]):
    model = User

    async def get_by_email(self, session: AsyncSession, email: str) -> User | None:
        return await self.get_by_field(session, email=email)

    async def list_paginated(
        self,
        session: AsyncSession,
        options: QueryOptions,
        resource: ResourceConfig,
    ) -> OffsetPage[User]:
        """Page-based user list for the API."""
        return await self.paginate_pages(session, select(User), options, resource)
