"""UserService — user registration, profile updates and listing."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from orderhub.dao.base import OffsetPage
from orderhub.dao.user_dao import UserDAO
from orderhub.models.user import User
from orderhub.query.params import QueryOptions
from orderhub.query.resources import ResourceConfig
from orderhub.services import ConflictError, NotFoundError, ValidationError


class UserService:
    """Stateless service for user CRUD."""

    def __init__(self, user_dao: UserDAO, resource: ResourceConfig) -> None:
        self._user_dao = user_dao
        self._resource = resource

    async def list(self, session: AsyncSession, options: QueryOptions) -> OffsetPage[User]:
        """Return one page of users filtered and sorted per *options*."""
        return await self._user_dao.list_paginated(session, options, self._resource)

    async def get(self, session: AsyncSession, user_id: str) -> User:
        """Raises :class:`NotFoundError` if the user does not exist."""
        user = await self._user_dao.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    async def create(self, session: AsyncSession, *, email: str, name: str) -> User:
        """Register a user. Emails are unique (409 on reuse)."""
        if not name.strip():
            raise ValidationError("name cannot be empty")
        existing = await self._user_dao.get_by_email(session, email)
        if existing is not None:
            raise ConflictError(f"user with email '{email}' already exists")
        return await self._user_dao.create(session, email=email, name=name.strip())

    async def update(self, session: AsyncSession, user_id: str, *, name: str) -> User:
        """Rename a user; blank names are rejected."""
        if not name.strip():
            raise ValidationError("name cannot be empty")
        await self.get(session, user_id)
        updated = await self._user_dao.update(session, user_id, name=name.strip())
        if updated is None:
            raise NotFoundError("user not found")
        return updated

    async def delete(self, session: AsyncSession, user_id: str) -> None:
        if not await self._user_dao.delete(session, user_id):
            raise NotFoundError("user not found")
