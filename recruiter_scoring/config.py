"""Configuration management for recruiter scoring.

Scoring constants and logging level are loaded from environment variables
(or a ``.env`` file) via pydantic-settings.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Length of the review window, in weeks
    window_weeks: int = Field(default=1, ge=1)

    # Score transform constants
    growth_factor: float = Field(default=10.0, gt=0)
    diminishing_factor: float = Field(default=2.0, gt=0)

    # Floor applied to every max_slots write
    min_max_slots: int = Field(default=1, ge=1)

    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings (cached singleton)."""
    return Settings()
