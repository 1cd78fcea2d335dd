"""Dashboard View: progress figures and track ordering derived from a profile.

Invariants:
    - Idle profile: 30 days remaining, 0% progress
    - Active profile on day d: 30 - (d - 1) days remaining, (d - 1) / 30 progress
    - Owned tracks ordered active first, completed last, purchase order otherwise
"""

from dataclasses import dataclass

from stoic_journal.core.domain_types import TRACK_LENGTH_DAYS, Track


@dataclass(frozen=True)
class DashboardView:
    current_track: str | None
    current_day: int
    streak: int
    total_days_completed: int
    days_remaining: int
    progress_percentage: int
    owned_tracks: list[str]
    available_tracks: list[str]


def order_owned_tracks(profile: dict, purchases: list[str]) -> list[str]:
    active = profile.get("current_track")
    completed = {
        record["track"] if isinstance(record, dict) else record
        for record in profile.get("tracks_completed") or []
    }

    def rank(track: str) -> int:
        if track == active:
            return 0
        return 2 if track in completed else 1

    return sorted(purchases, key=rank)


def resolve_dashboard(profile: dict, purchases: list[str]) -> DashboardView:
    current_track = profile.get("current_track")
    if current_track:
        current_day = profile.get("current_day") or 1
        days_remaining = TRACK_LENGTH_DAYS - (current_day - 1)
        progress = round((current_day - 1) / TRACK_LENGTH_DAYS * 100)
    else:
        current_day = 0
        days_remaining = TRACK_LENGTH_DAYS
        progress = 0
    return DashboardView(
        current_track=current_track,
        current_day=current_day,
        streak=profile.get("streak") or 0,
        total_days_completed=profile.get("total_days_completed") or 0,
        days_remaining=days_remaining,
        progress_percentage=progress,
        owned_tracks=order_owned_tracks(profile, purchases),
        available_tracks=[t.value for t in Track if t.value not in purchases],
    )
