"""Profile State: per-user progress record and its JSON round-trip.

Invariants:
    - current_day == 0 iff current_track is None; otherwise 1 <= current_day <= 30
    - tracks_completed holds at most one record per track
    - from_dict() never raises on stored data: unknown tracks become Idle,
      missing counters become 0, legacy bare-string completions become records

Design Decisions:
    - Pure dataclass, no IO: the service layer loads, transitions and saves
    - Timestamps stored as ISO strings, matching what the key-value store holds
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from stoic_journal.core.domain_types import Track, TRACK_LENGTH_DAYS


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CompletionRecord:
    """One finished 30-day track."""
    track: str
    completed_at: str | None
    days_completed: int = TRACK_LENGTH_DAYS

    def to_dict(self) -> dict:
        return {
            "track": self.track,
            "completed_at": self.completed_at,
            "days_completed": self.days_completed,
        }

    @classmethod
    def from_raw(cls, raw: object) -> "CompletionRecord | None":
        if isinstance(raw, str):
            return cls(track=raw, completed_at=None)
        if isinstance(raw, dict) and isinstance(raw.get("track"), str):
            return cls(
                track=raw["track"],
                completed_at=raw.get("completed_at"),
                days_completed=int(raw.get("days_completed") or TRACK_LENGTH_DAYS),
            )
        return None


@dataclass
class ProfileState:
    """Per-user progress record: pure dataclass, no IO."""

    current_track: Track | None = None
    current_day: int = 0
    streak: int = 0
    total_days_completed: int = 0
    tracks_completed: list[CompletionRecord] = field(default_factory=list)
    onboarding_completed: bool = False
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str | None = None

    @property
    def is_idle(self) -> bool:
        return self.current_track is None

    @property
    def completed_track_names(self) -> list[str]:
        return [r.track for r in self.tracks_completed]

    def has_completed(self, track: Track) -> bool:
        return track.value in self.completed_track_names

    def to_dict(self) -> dict:
        data = {
            "current_track": self.current_track.value if self.current_track else None,
            "current_day": self.current_day,
            "streak": self.streak,
            "total_days_completed": self.total_days_completed,
            "tracks_completed": [r.to_dict() for r in self.tracks_completed],
            "onboarding_completed": self.onboarding_completed,
            "created_at": self.created_at,
        }
        if self.updated_at:
            data["updated_at"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ProfileState":
        track = Track.parse(data.get("current_track"))
        day = _as_int(data.get("current_day"))
        if track is None or not 1 <= day <= TRACK_LENGTH_DAYS:
            track, day = None, 0

        records: list[CompletionRecord] = []
        raw_completed = data.get("tracks_completed")
        if isinstance(raw_completed, list):
            for raw in raw_completed:
                record = CompletionRecord.from_raw(raw)
                if record and record.track not in [r.track for r in records]:
                    records.append(record)

        return cls(
            current_track=track,
            current_day=day,
            streak=_as_int(data.get("streak")),
            total_days_completed=_as_int(data.get("total_days_completed")),
            tracks_completed=records,
            onboarding_completed=bool(data.get("onboarding_completed", False)),
            created_at=data.get("created_at") or utc_now_iso(),
            updated_at=data.get("updated_at"),
        )


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    return 0
