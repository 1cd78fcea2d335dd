"""Journal Schemas: track start, entry save and day completion bodies.

Invariants:
    - trackName is kept as a raw string here; the route resolves it to a Track
      so unknown names produce INVALID_TRACK rather than a generic schema error
    - Day range and entry text rules live in core/ (validate_day_number,
      validate_entry_text)
"""

from pydantic import BaseModel, ConfigDict, Field


class TrackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    track_name: str | None = Field(None, alias="trackName")


class JournalEntryRequest(TrackRequest):
    day: int | None = None
    entry_text: str | None = Field(None, alias="entryText")


class CompleteDayRequest(TrackRequest):
    day: int | None = None
