"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets and connection strings come from environment variables
    - get_settings() is cached (lru_cache) — single instance per process
    - Money defaults are Decimal, never float

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://earn:earn@db:5432/earnledger"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Settlement defaults (used when no per-country ReferralSetting exists)
    default_task_payout: Decimal = Decimal("0.50")
    default_referral_reward: Decimal = Decimal("0.50")
    default_min_withdrawal: Decimal = Decimal("20")

    # Identity — header set by the upstream authenticator
    identity_header: str = "X-User-Id"

    # Bootstrap admin, created on startup when username and password are set
    admin_username: str | None = None
    admin_email: str = "admin@localhost"
    admin_password: str | None = None
    admin_country: str = "USA"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
