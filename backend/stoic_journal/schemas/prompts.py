"""Track Prompt Schemas: the admin-seeded 30-day content of a track.

Invariants:
    - track_id is one of MONEY, RELATIONSHIPS, DISCIPLINE, EGO (case-insensitive on input)
    - days holds exactly 30 entries; every required text field is non-empty
    - evening_reflection_prompts is a list of strings
"""

from pydantic import BaseModel, Field, field_validator

from stoic_journal.core.domain_types import Track, TRACK_LENGTH_DAYS


class PromptDay(BaseModel):
    """One day of track content."""
    day: int = Field(ge=1, le=TRACK_LENGTH_DAYS)
    daily_theme: str = Field(min_length=1)
    stoic_quote: str = Field(min_length=1)
    quote_author: str = Field(min_length=1)
    bro_translation: str = Field(min_length=1)
    todays_challenge: str = Field(min_length=1)
    challenge_type: str | None = None
    todays_intention: str = Field(min_length=1)
    evening_reflection_prompts: list[str]


class TrackPrompts(BaseModel):
    """Seed payload and stored document for one track."""
    track_id: str
    days: list[PromptDay] = Field(
        min_length=TRACK_LENGTH_DAYS, max_length=TRACK_LENGTH_DAYS,
    )

    @field_validator("track_id")
    @classmethod
    def known_track(cls, v: str) -> str:
        track = Track.from_prompt_id(v)
        if track is None:
            raise ValueError("Invalid track_id")
        return track.prompt_id
