"""Profile Schemas: the client-writable subset of the profile."""

from pydantic import BaseModel, ConfigDict


class ProfileUpdate(BaseModel):
    """Only onboarding_completed is client-writable; other keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    onboarding_completed: bool | None = None
