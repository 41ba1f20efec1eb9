"""
Configuration settings for the wordledger progress core.

Uses Pydantic Settings for environment variable management with .env file support.
Every variable is read with the ``WORDLEDGER_`` prefix, e.g. ``WORDLEDGER_DATABASE_URL``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".wordledger"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORDLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DATA_DIR / 'ledger.db'}",
        description="SQLAlchemy connection string for the progress database",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo emitted SQL (debugging only)",
    )
    sqlite_busy_timeout_seconds: float = Field(
        default=30.0,
        description="How long a SQLite writer waits for the database lock",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Calendar
    # ========================================
    study_timezone: str = Field(
        default="UTC",
        description="IANA zone used to turn trusted time into study/quota days",
    )

    # ========================================
    # Free tier & unlocks
    # ========================================
    free_daily_review_limit: int = Field(
        default=10,
        ge=0,
        description="Reviews a free user may consume per trusted calendar day",
    )
    unlock_duration_hours: int = Field(
        default=3,
        ge=1,
        description="Lifetime of a time-limited level unlock",
    )

    # ========================================
    # Quiz & review queue
    # ========================================
    distractor_candidate_limit: int = Field(
        default=10,
        ge=1,
        description="Same-level candidates drawn before distractor selection",
    )
    distractor_count: int = Field(
        default=3,
        ge=1,
        description="Wrong answers shown next to the correct one",
    )
    review_queue_limit: int = Field(
        default=20,
        ge=1,
        description="Default size of the review queue",
    )

    @field_validator("study_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        # Imported lazily so a bad value surfaces as a settings error
        from wordledger.core.dates import resolve_timezone

        resolve_timezone(value)
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
