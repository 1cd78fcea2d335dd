"""Purchase Ledger: the per-user set of owned tracks.

Invariants:
    - Stored under "purchases:{user_id}" as a duplicate-free list of track names
    - Grows monotonically: nothing in this service removes a purchase
    - Every write (credit, initialize, reset) runs under the user's lock;
      credit() is idempotent per (user, track)
    - list_for_display() never fails: store errors degrade to [] and a non-list
      value is reset to []
"""

import logging

from stoic_journal.core.domain_types import Track
from stoic_journal.core.enforce_payment import credit_tracks
from stoic_journal.core.errors import DatabaseError
from stoic_journal.core.repository_protocols import KeyValueStore
from stoic_journal.core.user_locks import UserLockRegistry

logger = logging.getLogger(__name__)


def purchases_key(user_id: str) -> str:
    return f"purchases:{user_id}"


class PurchaseLedger:
    """Reads and credits track ownership."""

    def __init__(self, store: KeyValueStore, locks: UserLockRegistry):
        self._store = store
        self._locks = locks

    async def owned(self, user_id: str) -> list[str]:
        """Strict read used before state changes. Store errors propagate."""
        purchases = await self._store.get(purchases_key(user_id))
        if not isinstance(purchases, list):
            return []
        return [p for p in purchases if isinstance(p, str)]

    async def list_for_display(self, user_id: str) -> list[str]:
        try:
            purchases = await self._store.get(purchases_key(user_id))
        except DatabaseError as e:
            logger.error(
                f"Purchases read failed, returning empty list: {e.message}",
                extra={"user_id": user_id},
            )
            return []

        if purchases is None:
            return []
        if not isinstance(purchases, list):
            logger.warning(
                "Purchases data is not a list, resetting",
                extra={"user_id": user_id},
            )
            try:
                await self._reset_if_malformed(user_id)
            except DatabaseError as e:
                logger.error(
                    f"Failed to reset purchases: {e.message}",
                    extra={"user_id": user_id},
                )
            return []
        return purchases

    async def initialize(self, user_id: str) -> None:
        """Create an empty ledger unless one exists. Callers must not hold the user lock."""
        async with self._locks.hold(user_id):
            if await self._store.get(purchases_key(user_id)) is None:
                await self._store.set(purchases_key(user_id), [])

    async def credit(
        self, user_id: str, tracks: list[Track],
    ) -> tuple[list[str], list[str]]:
        """Add tracks not yet owned. Returns (purchases, newly added)."""
        async with self._locks.hold(user_id):
            current = await self.owned(user_id)
            updated, added = credit_tracks(current, tracks)
            if added:
                await self._store.set(purchases_key(user_id), updated)
                logger.info(
                    "Tracks credited",
                    extra={"user_id": user_id, "added_tracks": added},
                )
            return updated, added

    async def _reset_if_malformed(self, user_id: str) -> None:
        async with self._locks.hold(user_id):
            if not isinstance(await self._store.get(purchases_key(user_id)), list):
                await self._store.set(purchases_key(user_id), [])
