"""Journal Routes: track start, entries and day completion.

Invariants:
    - Track names are validated before any store access (400 INVALID_TRACK)
    - start-track and complete-day delegate every rule to ProfileService
"""

from fastapi import APIRouter, Depends

from stoic_journal.api.dependencies import get_context, get_current_user, parse_track
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.schemas.journal import (
    CompleteDayRequest, JournalEntryRequest, TrackRequest,
)
from stoic_journal.services.app_context import AppContext

router = APIRouter(prefix="/api/v1/journal", tags=["journal"])


@router.post("/start-track")
async def start_track(
    body: TrackRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    profile = await context.profiles.start_track(user.id, track)
    return {
        "success": True,
        "message": f"Started {track.value} track",
        "profile": profile,
    }


@router.get("/entries/{track_name}")
async def list_entries(
    track_name: str,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(track_name)
    entries = await context.journal.list_entries(user.id, track)
    return {"success": True, "entries": entries}


@router.post("/entry")
async def save_entry(
    body: JournalEntryRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    entry = await context.journal.save_entry(
        user.id, track, body.day, body.entry_text,
    )
    return {"success": True, "entry": entry}


@router.post("/complete-day")
async def complete_day(
    body: CompleteDayRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    result = await context.profiles.complete_day(user.id, track, body.day)
    return {
        "success": True,
        "profile": result.profile,
        "trackCompleted": result.track_completed,
        "message": result.message,
    }
