import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    Local development reads `backend/.env` for convenience. Under pytest or
    in CI the file is ignored so tests control the environment explicitly.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'test', 'staging' or 'production'",
    )

    DATABASE_URL: str = "sqlite:///./data/ideaboard.db"

    # Identity claims are issued by the external auth provider and signed
    # with this key; the API only verifies them.
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="Key used to verify identity tokens (SECRET_KEY env var)",
    )
    ALGORITHM: str = "HS256"
    MODERATOR_CLAIM: str = Field(
        default="is_moderator",
        description="Name of the boolean token claim granting moderator rights",
    )
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    # Observability
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )
    LOG_TO_FILE: bool = Field(
        default=False,
        description="Also write logs to a rotating file under ./logs",
    )
    SENTRY_DSN: str = Field(
        default="",
        description="Sentry DSN; Sentry is disabled when empty",
    )
    SENTRY_TRACES_SAMPLE_RATE: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Fraction of requests traced by Sentry",
    )

    # Content limits
    IDEA_TITLE_MAX_LENGTH: int = Field(
        default=200,
        description="Maximum idea title length after trimming",
    )
    IDEA_DESCRIPTION_MAX_LENGTH: int = Field(
        default=5000,
        description="Maximum idea description length after trimming",
    )
    COMMENT_MAX_LENGTH: int = Field(
        default=2000,
        description="Maximum comment length after trimming",
    )

    # Category catalog
    CATEGORY_CACHE_TTL_SECONDS: float = Field(
        default=300.0,
        description="How long the in-process category list stays cached",
    )
    CATEGORY_CATALOG_PATH: str | None = Field(
        default=None,
        description="Optional JSON file with the category catalog used by init_db",
    )

    # Rate limits (slowapi syntax)
    RATE_LIMIT_SUBMIT: str = Field(
        default="10/hour",
        description="Idea submissions per caller",
    )
    RATE_LIMIT_COMMENT: str = Field(
        default="30/minute",
        description="Comments per caller",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Instantiating Settings() raises pydantic.ValidationError if SECRET_KEY isn't set.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
