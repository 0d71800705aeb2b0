"""Shared fixtures for orderhub tests.

DAO and executor tests run against an in-memory SQLite database through
aiosqlite, so no external service is needed.  Set ``TEST_DATABASE_URL`` to run
the same tests against PostgreSQL instead.
"""

import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orderhub.core.database import Base
from orderhub.models import Item, Order, User

DEFAULT_DB_URL = "sqlite+aiosqlite://"

BASE_TIME = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def db_url():
    return os.environ.get("TEST_DATABASE_URL", DEFAULT_DB_URL)


@pytest_asyncio.fixture
async def engine(db_url):
    """Fresh schema per test; in-memory SQLite needs one shared connection."""
    if db_url.startswith("sqlite"):
        eng = create_async_engine(
            db_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        eng = create_async_engine(db_url)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Provide a transactional session that rolls back after each test."""
    async with async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)() as sess:
        async with sess.begin():
            yield sess
            await sess.rollback()


def at(minutes: int) -> datetime:
    """Deterministic timestamp ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


@pytest_asyncio.fixture
async def people(session):
    """John, Joanna and Bob; Bob is the newest."""
    users = [
        User(id="u-john", email="john@example.com", name="John", created_at=at(0)),
        User(id="u-joanna", email="joanna@example.com", name="Joanna", created_at=at(1)),
        User(id="u-bob", email="bob@example.com", name="Bob", created_at=at(2)),
    ]
    session.add_all(users)
    await session.flush()
    return {u.name: u for u in users}


@pytest_asyncio.fixture
async def orders(session, people):
    """Six orders spread over the three users with varied totals and statuses."""
    spec = [
        ("o-1", "u-john", "pending", "120.00", 0),
        ("o-2", "u-john", "confirmed", "640.00", 1),
        ("o-3", "u-joanna", "shipped", "1500.00", 2),
        ("o-4", "u-joanna", "pending", "80.50", 3),
        ("o-5", "u-bob", "pending", "999.99", 4),
        ("o-6", "u-bob", "cancelled", "45.00", 5),
    ]
    rows = [
        Order(
            id=oid,
            user_id=uid,
            status=status,
            total=Decimal(total),
            items=[
                {"product_id": "p", "product_name": "Widget", "quantity": 1, "price": total}
            ],
            created_at=at(minute),
        )
        for oid, uid, status, total, minute in spec
    ]
    session.add_all(rows)
    await session.flush()
    return {o.id: o for o in rows}


@pytest_asyncio.fixture
async def catalogue(session):
    """25 items ``item-00`` .. ``item-24``; prices repeat every five rows."""
    rows = [
        Item(
            id=f"item-{n:02d}",
            name=f"Item {n:02d}",
            sku=f"SKU-{n:02d}",
            price=Decimal(10 * (n % 5 + 1)),
            created_at=at(n),
        )
        for n in range(25)
    ]
    session.add_all(rows)
    await session.flush()
    return rows
