"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Collaborator clients are built from Settings in the lifespan, never at import

Design Decisions:
    - Defaults provided for every non-secret setting so tests and docker-compose
      start without a .env file
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database (key-value table)
    database_url: str = (
        "postgresql+asyncpg://stoic:stoic@db:5432/stoic"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Identity provider (Supabase Auth)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = "anon-placeholder"
    supabase_service_role_key: str = "service-role-placeholder"
    identity_timeout_seconds: float = 10.0

    # Payment processor (Stripe)
    stripe_secret_key: str = "sk_test_placeholder"
    stripe_publishable_key: str | None = None
    stripe_webhook_secret: str | None = None
    stripe_max_retries: int = 2
    stripe_base_delay_ms: int = 500
    stripe_max_delay_ms: int = 8_000

    # Catalogue
    track_price_cents: int = 400
    track_currency: str = "usd"

    # Admin / development surfaces
    admin_token: str | None = None
    enable_dev_routes: bool = False

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
