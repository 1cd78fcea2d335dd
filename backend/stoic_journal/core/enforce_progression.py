"""Track Progression Enforcement: validates and applies profile state transitions.

Invariants:
    - validate_* functions are PURE: return an error descriptor or None, never mutate
    - apply_* functions mutate only the ProfileState passed in
    - start: track must be purchased; always lands on InProgress(track, 1)
    - complete: (track, day) must equal (current_track, current_day) exactly
    - day >= 30 completion appends one CompletionRecord per track and returns to Idle

Design Decisions:
    - Validation separated from mutation: the service raises on the descriptor,
      then applies, then persists (same shape as the round/obviousness rules)
"""

from stoic_journal.core.domain_types import Track, TRACK_LENGTH_DAYS
from stoic_journal.core.profile_state import (
    ProfileState, CompletionRecord, utc_now_iso,
)


def validate_day_number(day: object) -> dict | None:
    """Day must be an integer within 1..30."""
    if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= TRACK_LENGTH_DAYS:
        return {
            "status": "error",
            "error_code": "INVALID_DAY",
            "message": "Invalid day number",
        }
    return None


def validate_start_track(track: Track, purchases: list[str]) -> dict | None:
    """Starting requires the track in the purchase set. Restarts are allowed."""
    if track.value not in purchases:
        return {
            "status": "error",
            "error_code": "TRACK_NOT_PURCHASED",
            "message": "Track not purchased",
        }
    return None


def validate_complete_day(
    state: ProfileState, track: Track, day: int,
) -> dict | None:
    """Only the stored current day of the stored current track can be completed."""
    day_error = validate_day_number(day)
    if day_error:
        return day_error

    if state.current_track != track:
        return {
            "status": "error",
            "error_code": "NOT_CURRENT_TRACK",
            "message": "Not the current active track",
        }

    if state.current_day != day:
        return {
            "status": "error",
            "error_code": "NOT_CURRENT_DAY",
            "message": "Not the current day",
        }

    return None


def apply_start_track(
    state: ProfileState, track: Track, now: str | None = None,
) -> ProfileState:
    """Idle | InProgress(any) -> InProgress(track, 1)."""
    state.current_track = track
    state.current_day = 1
    state.updated_at = now or utc_now_iso()
    return state


def apply_complete_day(
    state: ProfileState, track: Track, day: int, now: str | None = None,
) -> bool:
    """Advance one day. Returns True when the track was finished.

    Caller must have passed validate_complete_day first.
    """
    timestamp = now or utc_now_iso()
    state.streak += 1
    state.total_days_completed += 1
    state.updated_at = timestamp

    if day >= TRACK_LENGTH_DAYS:
        if not state.has_completed(track):
            state.tracks_completed.append(CompletionRecord(
                track=track.value,
                completed_at=timestamp,
                days_completed=TRACK_LENGTH_DAYS,
            ))
        state.current_track = None
        state.current_day = 0
        return True

    state.current_day = day + 1
    return False


def completion_message(track: Track, day: int, track_completed: bool) -> str:
    if track_completed:
        return f"Congratulations! You've completed the {track.value} track!"
    return f"Day {day} completed! Ready for day {day + 1}."
