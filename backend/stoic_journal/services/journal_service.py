"""Journal Service: per-track daily entries stored under "journal:{user_id}:{track}"."""

import logging

from stoic_journal.core.domain_types import Track
from stoic_journal.core.errors import ErrorContext, ValidationError
from stoic_journal.core.journal_entries import validate_entry, upsert_entry
from stoic_journal.core.repository_protocols import KeyValueStore
from stoic_journal.core.user_locks import UserLockRegistry

logger = logging.getLogger(__name__)


def journal_key(user_id: str, track: Track) -> str:
    return f"journal:{user_id}:{track.value}"


class JournalService:
    """Upserts and lists journal entries."""

    def __init__(self, store: KeyValueStore, locks: UserLockRegistry):
        self._store = store
        self._locks = locks

    async def list_entries(self, user_id: str, track: Track) -> list[dict]:
        entries = await self._store.get(journal_key(user_id, track))
        if not isinstance(entries, list):
            return []
        return entries

    async def save_entry(
        self, user_id: str, track: Track, day: int, text: str,
    ) -> dict:
        error = validate_entry(day, text)
        if error:
            field = "day" if error["error_code"] == "INVALID_DAY" else "entryText"
            raise ValidationError(
                error["message"], field,
                ErrorContext(user_id=user_id, track=track.value, day=day),
            )

        async with self._locks.hold(user_id):
            entries = await self.list_entries(user_id, track)
            updated, entry = upsert_entry(entries, day, text)
            await self._store.set(journal_key(user_id, track), updated)

        logger.info(
            "Journal entry saved",
            extra={"user_id": user_id, "track": track.value, "day": day},
        )
        return entry
