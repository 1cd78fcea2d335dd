"""Auth Schemas: signup request validated before reaching the identity provider."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SignupRequest(BaseModel):
    """Signup: email, password and display name are all required."""
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)
    full_name: str = Field(alias="fullName", min_length=1, max_length=200)

    @field_validator("email", "full_name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v
