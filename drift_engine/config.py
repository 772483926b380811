"""Drift engine configuration loaded from environment variables."""

from __future__ import annotations

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 20
DEFAULT_MAX_BYTES = 100 * 1024 * 1024


class DriftSettings(BaseSettings):
    """Settings loaded from environment variables with DRIFT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="DRIFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Snapshot store bounds
    max_entries: int = DEFAULT_MAX_ENTRIES
    max_bytes: int = DEFAULT_MAX_BYTES

    # Logging
    structured_logging: bool = False
    log_level: str = "INFO"

    @field_validator("max_entries", "max_bytes")
    @classmethod
    def require_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("log_level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.getLevelNamesMapping()[self.log_level]


def load_settings(**overrides: object) -> DriftSettings:
    """Load settings from environment, with optional overrides for testing."""
    settings = DriftSettings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded drift settings: max_entries=%d max_bytes=%d",
            settings.max_entries,
            settings.max_bytes,
        )

    return settings
