"""SQL Key-Value Store: KeyValueStore implementation over the kv_store table.

Invariants:
    - get() returns None for a missing key, never raises KeyError
    - set() is an upsert: last write wins
    - Every call opens and closes its own session (one unit of work per call)
    - Failures surface as DatabaseError via DatabaseSessionManager

Design Decisions:
    - Upsert via get-then-merge instead of dialect-specific ON CONFLICT:
      the same code runs on PostgreSQL and SQLite
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, delete

from stoic_journal.infrastructure.database import DatabaseSessionManager
from stoic_journal.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


class SqlKeyValueStore:
    """JSON documents addressed by string keys, stored in one SQL table."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def get(self, key: str) -> Any | None:
        async with self._manager.session() as db:
            result = await db.execute(
                select(KVEntry.value).where(KVEntry.key == key),
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        async with self._manager.session() as db:
            entry = await db.get(KVEntry, key)
            if entry is None:
                db.add(KVEntry(key=key, value=value))
            else:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
            await db.commit()

    async def delete(self, key: str) -> None:
        async with self._manager.session() as db:
            await db.execute(delete(KVEntry).where(KVEntry.key == key))
            await db.commit()
