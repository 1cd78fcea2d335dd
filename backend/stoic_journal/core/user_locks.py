"""Per-User Locks: serialize read-modify-write cycles on one user's records.

Invariants:
    - At most one holder per user id at a time within this process
    - Locks for different users never block each other
    - A lock is dropped from the registry once nobody holds or waits on it

Design Decisions:
    - In-process asyncio.Lock registry: the service runs as a single uvicorn
      process; a multi-worker deployment would need a store-level lock
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class UserLockRegistry:
    """Lazily creates one asyncio.Lock per user id."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._waiters[user_id] = self._waiters.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[user_id] -= 1
            if self._waiters[user_id] == 0:
                del self._waiters[user_id]
                self._locks.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._locks)
