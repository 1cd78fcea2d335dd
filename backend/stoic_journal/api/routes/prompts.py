"""Prompt Routes: read track content; admin seeding.

Invariants:
    - GET accepts the track id in any case ("money", "MONEY")
    - Seeding requires X-Admin-Token and a complete 30-day payload
"""

from fastapi import APIRouter, Depends

from stoic_journal.api.dependencies import get_context, get_current_user, require_admin
from stoic_journal.core.domain_types import Track
from stoic_journal.core.errors import InvalidTrackError
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.schemas.prompts import TrackPrompts
from stoic_journal.services.app_context import AppContext

router = APIRouter(prefix="/api/v1/prompts", tags=["prompts"])
admin_router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/{track_id}")
async def get_prompts(
    track_id: str,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = Track.from_prompt_id(track_id)
    if track is None:
        raise InvalidTrackError(track_id)
    return await context.prompts.get(track)


@admin_router.post("/seed-prompts", dependencies=[Depends(require_admin)])
async def seed_prompts(
    body: TrackPrompts, context: AppContext = Depends(get_context),
):
    track = await context.prompts.seed(body)
    return {
        "success": True,
        "message": f"Successfully seeded prompts for {track.prompt_id} track",
    }
