"""Dependency injection — session and service singletons."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from orderhub.dao.item_dao import ItemDAO
from orderhub.dao.order_dao import OrderDAO
from orderhub.dao.user_dao import UserDAO
from orderhub.query.resources import RESOURCES
from orderhub.services.item_service import ItemService
from orderhub.services.order_service import OrderService
from orderhub.services.user_service import UserService

# ---------------------------------------------------------------------------
# DAO singletons
# ---------------------------------------------------------------------------
_user_dao = UserDAO()
_order_dao = OrderDAO()
_item_dao = ItemDAO()

# ---------------------------------------------------------------------------
# Service singletons (each bound to its resource query config)
# ---------------------------------------------------------------------------
_user_service = UserService(_user_dao, RESOURCES["users"])
_order_service = OrderService(_order_dao, _user_dao, RESOURCES["orders"])
_item_service = ItemService(_item_dao, RESOURCES["items"])

# ---------------------------------------------------------------------------
# Engine / session factory (initialised by app lifespan)
# ---------------------------------------------------------------------------
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Create the async engine and session factory. Called once at startup."""
    global _engine, _session_factory  # noqa: PLW0603
    url = database_url or os.environ.get(
        "ORDERHUB_DATABASE_URL", "postgresql+asyncpg://localhost/orderhub"
    )
    _engine = create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=1800,
    )
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("call init_session_factory() first")
    return _engine


async def dispose_engine() -> None:
    """Dispose the async engine, closing all pooled connections."""
    global _engine  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a per-request session with automatic commit/rollback."""
    if _session_factory is None:
        raise RuntimeError("call init_session_factory() before handling requests")
    async with _session_factory() as session:
        async with session.begin():
            yield session


# ---------------------------------------------------------------------------
# Service getters (for Depends())
# ---------------------------------------------------------------------------


def get_user_service() -> UserService:
    return _user_service


def get_order_service() -> OrderService:
    return _order_service


def get_item_service() -> ItemService:
    return _item_service
