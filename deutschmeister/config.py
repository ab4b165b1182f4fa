"""
Configuration settings for DeutschMeister.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a DEUTSCHMEISTER_ prefixed variable,
e.g. DEUTSCHMEISTER_ACTIVE_POOL_LIMIT=30.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, NonNegativeInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEUTSCHMEISTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Files
    # ========================================
    progress_path: Path = Field(
        default=Path.home() / ".deutschmeister" / "progress.json",
        description="JSON file holding the learner's progress map",
    )
    vocabulary_path: Path | None = Field(
        default=None,
        description="Vocabulary JSON file (bundled sample deck if unset)",
    )

    # ========================================
    # Scheduling
    # ========================================
    active_pool_limit: NonNegativeInt | None = Field(
        default=50,
        description="Max not-yet-mastered words in the learning pool (none = no ceiling)",
    )
    mastery_threshold: int = Field(
        default=10,
        ge=1,
        description="Number of 'easy' grades that retires a word from the pool",
    )
    new_items_per_session: NonNegativeInt | None = Field(
        default=None,
        description="Optional cap on new words admitted per session",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Minimum loguru level written to stderr",
    )

    @field_validator("active_pool_limit", "new_items_per_session", mode="before")
    @classmethod
    def _parse_no_limit(cls, value: object) -> object:
        """Accept "none" or "null" from the environment as no limit."""
        if isinstance(value, str) and value.strip().lower() in {"none", "null"}:
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
