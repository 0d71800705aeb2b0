"""Seed a small demo catalogue into the database.

1. Create the schema if missing
2. Insert demo users (skipping emails that already exist)
3. Insert demo items (skipping known SKUs)
4. Place one pending order per user
"""

import asyncio
import os
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

load_dotenv(ROOT / ".env")

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from orderhub.core.database import create_schema
from orderhub.dao.item_dao import ItemDAO
from orderhub.dao.order_dao import OrderDAO
from orderhub.dao.user_dao import UserDAO
from orderhub.query.resources import ORDERS
from orderhub.services.order_service import OrderService

USERS = [
    ("bob@example.com", "Bob"),
    ("john@example.com", "John"),
    ("joanna@example.com", "Joanna"),
]

ITEMS = [
    ("KB-001", "Mechanical keyboard", Decimal("89.90")),
    ("MS-002", "Wireless mouse", Decimal("24.50")),
    ("MN-003", "27in monitor", Decimal("329.00")),
]


async def main() -> None:
    url = os.environ.get("ORDERHUB_DATABASE_URL", "postgresql+asyncpg://localhost/orderhub")
    engine = create_async_engine(url, pool_pre_ping=True)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    await create_schema(engine)

    user_dao, item_dao, order_dao = UserDAO(), ItemDAO(), OrderDAO()
    orders = OrderService(order_dao, user_dao, ORDERS)

    async with factory() as session:
        created_users = []
        for email, name in USERS:
            if await user_dao.get_by_email(session, email) is not None:
                print(f"  SKIP user {email}: exists")
                continue
            created_users.append(await user_dao.create(session, email=email, name=name))

        catalogue = []
        for sku, name, price in ITEMS:
            item = await item_dao.get_by_sku(session, sku)
            if item is None:
                item = await item_dao.create(session, sku=sku, name=name, price=price)
            catalogue.append(item)

        for n, user in enumerate(created_users, start=1):
            await orders.create(
                session,
                user_id=user.id,
                items=[
                    {
                        "product_id": item.sku,
                        "product_name": item.name,
                        "quantity": n,
                        "price": item.price,
                    }
                    for item in catalogue[:n]
                ],
            )
        await session.commit()

    print(f"Done: {len(created_users)} users, {len(catalogue)} items, {len(created_users)} orders.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
