"""users table."""

import uuid

from sqlalchemy import Index, String, desc
from sqlalchemy.orm import Mapped, mapped_column

from orderhub.core.database import Base, TimestampMixin


def new_id() -> str:
    return str(uuid.uuid4())


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        Index("idx_users_cursor", desc("created_at"), desc("id")),
    )
