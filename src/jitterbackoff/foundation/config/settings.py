"""Environment-based configuration using pydantic-settings.

Lets deployments override backoff defaults and the library log level without
code changes. Supports .env files and nested configuration. Settings only
produce overrides; the built-in defaults are never modified.

Example:
    >>> from jitterbackoff.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.logging.level
    'WARNING'

    # Or with environment variables:
    # JITTERBACKOFF_BACKOFF_INITIAL_DELAY=0
    # JITTERBACKOFF_BACKOFF_BASE_DELAY=0.5
    # JITTERBACKOFF_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackoffSettings(BaseSettings):
    """Backoff overrides. Unset fields fall back to the built-in defaults.

    Values are kept as given and not parsed or range-checked here; strict
    or coercing construction decides what happens to bad values.
    """

    model_config = SettingsConfigDict(
        env_prefix="JITTERBACKOFF_BACKOFF_",
        extra="ignore",
    )

    initial_delay: str | float | timedelta | None = Field(default=None, description="Initial delay in seconds")
    base_delay: str | float | timedelta | None = Field(default=None, description="Base delay in seconds")
    exponential_limit: str | float | timedelta | None = Field(default=None, description="Exponential limit in seconds")
    jitter_factor: str | float | None = Field(default=None, description="Jitter factor in [0, 1)")

    @computed_field
    @property
    def is_customized(self) -> bool:
        """Whether any override is set."""
        return bool(self.to_options())

    def to_options(self) -> dict[str, Any]:
        """Overrides that are set, as raw values for `resolve_options`."""
        return self.model_dump(
            include={"initial_delay", "base_delay", "exponential_limit", "jitter_factor"},
            exclude_none=True,
        )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="JITTERBACKOFF_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        """Accept lowercase level names."""
        return v.upper() if isinstance(v, str) else v


class JitterBackoffSettings(BaseSettings):
    """Root settings for jitterbackoff.

    Loads configuration from environment variables with JITTERBACKOFF_ prefix.

    Example environment variables:
        JITTERBACKOFF_BACKOFF_EXPONENTIAL_LIMIT=60
        JITTERBACKOFF_BACKOFF_JITTER_FACTOR=0.2
        JITTERBACKOFF_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="JITTERBACKOFF_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    backoff: BackoffSettings = Field(default_factory=BackoffSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> JitterBackoffSettings:
    """Get the global settings instance (cached)."""
    return JitterBackoffSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
