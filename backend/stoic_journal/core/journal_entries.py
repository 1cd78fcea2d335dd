"""Journal Entries: pure upsert over the per-track entry list.

Invariants:
    - At most one entry per day in a track's list
    - Updating a day keeps its original created_at and position
    - entry_text is stored stripped; empty or whitespace-only text is rejected
"""

from stoic_journal.core.enforce_progression import validate_day_number
from stoic_journal.core.profile_state import utc_now_iso


def validate_entry_text(text: object) -> dict | None:
    if not isinstance(text, str) or not text.strip():
        return {
            "status": "error",
            "error_code": "EMPTY_ENTRY",
            "message": "Entry text is required",
        }
    return None


def validate_entry(day: object, text: object) -> dict | None:
    return validate_day_number(day) or validate_entry_text(text)


def upsert_entry(
    entries: list[dict], day: int, text: str, now: str | None = None,
) -> tuple[list[dict], dict]:
    """Return (new entry list, saved entry). Does not mutate the input list."""
    timestamp = now or utc_now_iso()
    updated = [e for e in entries if isinstance(e, dict)]
    index = next(
        (i for i, e in enumerate(updated) if e.get("day") == day), None,
    )
    entry = {
        "day": day,
        "entry_text": text.strip(),
        "created_at": (
            updated[index].get("created_at", timestamp)
            if index is not None else timestamp
        ),
        "updated_at": timestamp,
    }
    if index is not None:
        updated[index] = entry
    else:
        updated.append(entry)
    return updated, entry
