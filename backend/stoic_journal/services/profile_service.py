"""Profile Service: loads, transitions and persists the per-user progress record.

Invariants:
    - Profile stored under "profile:{user_id}"; created lazily on first read
    - Every mutation runs read-validate-apply-write under the user's lock, so
      two completions of the same day cannot both succeed
    - A failed profile read degrades to a default profile plus a warning
    - Clients may only set onboarding_completed; progress fields belong to
      start_track / complete_day
"""

import logging
from dataclasses import dataclass

from stoic_journal.core.domain_types import Track
from stoic_journal.core.enforce_progression import (
    validate_day_number,
    validate_start_track,
    validate_complete_day,
    apply_start_track,
    apply_complete_day,
    completion_message,
)
from stoic_journal.core.errors import (
    DatabaseError, ErrorContext, ProgressionError, ResourceNotFoundError,
    ValidationError,
)
from stoic_journal.core.profile_state import ProfileState, utc_now_iso
from stoic_journal.core.repository_protocols import KeyValueStore
from stoic_journal.core.user_locks import UserLockRegistry
from stoic_journal.services.purchase_ledger import PurchaseLedger

logger = logging.getLogger(__name__)

PROFILE_UNAVAILABLE_WARNING = (
    "Database temporarily unavailable - showing default profile"
)


def profile_key(user_id: str) -> str:
    return f"profile:{user_id}"


@dataclass
class ProfileRead:
    profile: dict
    warning: str | None = None


@dataclass
class DayCompletion:
    profile: dict
    track_completed: bool
    message: str


class ProfileService:
    """Profile state machine backed by the key-value store."""

    def __init__(
        self, store: KeyValueStore, ledger: PurchaseLedger, locks: UserLockRegistry,
    ):
        self._store = store
        self._ledger = ledger
        self._locks = locks

    async def create_initial(self, user_id: str) -> dict:
        """Write a fresh profile and an empty purchase ledger (signup)."""
        profile = ProfileState().to_dict()
        await self._store.set(profile_key(user_id), profile)
        await self._ledger.initialize(user_id)
        return profile

    async def get_or_create(self, user_id: str) -> ProfileRead:
        try:
            stored = await self._store.get(profile_key(user_id))
        except DatabaseError as e:
            logger.error(
                f"Profile read failed, serving default: {e.message}",
                extra={"user_id": user_id},
            )
            return ProfileRead(
                profile=ProfileState().to_dict(),
                warning=PROFILE_UNAVAILABLE_WARNING,
            )

        if isinstance(stored, dict):
            return ProfileRead(profile=ProfileState.from_dict(stored).to_dict())

        profile = ProfileState().to_dict()
        try:
            await self._store.set(profile_key(user_id), profile)
            await self._ledger.initialize(user_id)
        except DatabaseError as e:
            logger.error(
                f"Failed to persist default profile: {e.message}",
                extra={"user_id": user_id},
            )
        return ProfileRead(profile=profile)

    async def update(self, user_id: str, onboarding_completed: bool | None) -> dict:
        async with self._locks.hold(user_id):
            state = await self._load_or_404(user_id)
            if onboarding_completed is not None:
                state.onboarding_completed = onboarding_completed
            state.updated_at = utc_now_iso()
            return await self._save(user_id, state)

    async def start_track(self, user_id: str, track: Track) -> dict:
        context = ErrorContext(user_id=user_id, track=track.value)
        async with self._locks.hold(user_id):
            error = validate_start_track(track, await self._ledger.owned(user_id))
            if error:
                raise ProgressionError(error["message"], error["error_code"], context)

            state = await self._load_or_404(user_id)
            apply_start_track(state, track)
            profile = await self._save(user_id, state)

        logger.info("Track started", extra={"user_id": user_id, "track": track.value})
        return profile

    async def complete_day(self, user_id: str, track: Track, day: int) -> DayCompletion:
        context = ErrorContext(user_id=user_id, track=track.value, day=day)
        day_error = validate_day_number(day)
        if day_error:
            raise ValidationError(day_error["message"], "day", context)

        async with self._locks.hold(user_id):
            state = await self._load_or_404(user_id)
            error = validate_complete_day(state, track, day)
            if error:
                raise ProgressionError(error["message"], error["error_code"], context)

            track_completed = apply_complete_day(state, track, day)
            profile = await self._save(user_id, state)

        logger.info(
            "Day completed",
            extra={"user_id": user_id, "track": track.value, "day": day},
        )
        return DayCompletion(
            profile=profile,
            track_completed=track_completed,
            message=completion_message(track, day, track_completed),
        )

    async def _load_or_404(self, user_id: str) -> ProfileState:
        stored = await self._store.get(profile_key(user_id))
        if not isinstance(stored, dict):
            raise ResourceNotFoundError("Profile", user_id)
        return ProfileState.from_dict(stored)

    async def _save(self, user_id: str, state: ProfileState) -> dict:
        profile = state.to_dict()
        await self._store.set(profile_key(user_id), profile)
        return profile
