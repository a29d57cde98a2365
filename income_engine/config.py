# income_engine/config.py
"""
Engine configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging setup used by setup_logging()
- ROLLING_WINDOW_MONTHS: Length of the rolling income view
- CACHE_*: Snapshot cache used by the IncomeService

The engine performs no I/O, so there is nothing environment-specific to
connect to. Settings only tune presentation windows, logging and caching.

Usage:
    from income_engine.config import settings

    months = settings.rolling_window_months
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root holds the optional .env file
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - ROLLING_WINDOW_MONTHS: Months in the rolling income view (default: 12)
        - CACHE_TTL_SECONDS: Lifetime of a cached snapshot (default: 3600)
        - CACHE_MAX_SIZE: Maximum cached snapshots (default: 128)
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    rolling_window_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="Number of monthly buckets in the rolling income view"
    )

    cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="Snapshot cache lifetime in seconds (0 disables expiry checks)"
    )

    cache_max_size: int = Field(
        default=128,
        ge=1,
        le=10_000,
        description="Maximum number of cached snapshots"
    )

    app_name: str = "Portfolio Income Engine"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_logging_config(self) -> "Settings":
        """Normalize LOG_LEVEL so later lookups are case-insensitive."""
        object.__setattr__(self, "log_level", self.log_level.upper().strip())
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
