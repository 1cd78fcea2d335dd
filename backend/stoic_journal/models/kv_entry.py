"""Key-Value Entry ORM: the one table behind the generic JSON store.

Invariants:
    - key is the primary key (e.g. "profile:{user_id}", "journal:{user_id}:{track}")
    - value holds any JSON document (dict, list, scalar)
    - updated_at refreshed on every write
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from stoic_journal.db.base import Base


class KVEntry(Base):
    """One JSON document addressed by a string key."""
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
