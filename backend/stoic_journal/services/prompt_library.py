"""Prompt Library: stores and serves the 30-day content of each track.

Invariants:
    - Stored under "prompts:{TRACK_ID}" as the validated TrackPrompts document
    - Read-only for end users; seed() overwrites the whole document
"""

import logging

from stoic_journal.core.domain_types import Track
from stoic_journal.core.errors import ResourceNotFoundError
from stoic_journal.core.repository_protocols import KeyValueStore
from stoic_journal.schemas.prompts import TrackPrompts

logger = logging.getLogger(__name__)


def prompts_key(track: Track) -> str:
    return f"prompts:{track.prompt_id}"


class PromptLibrary:

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def seed(self, prompts: TrackPrompts) -> Track:
        track = Track.from_prompt_id(prompts.track_id)
        await self._store.set(prompts_key(track), prompts.model_dump())
        logger.info(
            f"Prompts seeded ({len(prompts.days)} days)",
            extra={"track": track.value},
        )
        return track

    async def get(self, track: Track) -> dict:
        data = await self._store.get(prompts_key(track))
        if not data:
            raise ResourceNotFoundError("Track prompts", track.prompt_id)
        return data
