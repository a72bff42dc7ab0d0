"""
Configuration — library defaults loaded from the environment / .env.

Uses pydantic-settings so applications can tune retry defaults and logging
without code changes:

    NEAT_CATCH_RETRY__MAX_RETRIES=5
    NEAT_CATCH_RETRY__DELAY=250
    NEAT_CATCH_RETRY__BACKOFF=linear
    NEAT_CATCH_LOG_LEVEL=DEBUG
    NEAT_CATCH_ENVIRONMENT=production

Only NeatCatchSettings is a BaseSettings instance; RetryDefaults is a plain
BaseModel populated through env_nested_delimiter="__".

These settings never change what neat_catch_retry does with explicitly built
RetryOptions; they feed RetryOptions.from_settings() and
ErrorTransformers.for_logging().
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from neat_catch.retry import Backoff


class RetryDefaults(BaseModel):
    """Default retry policy used by RetryOptions.from_settings()."""

    max_retries: int = Field(default=3, ge=0, description="Retries after the initial attempt")
    delay: float = Field(default=1000, ge=0, description="Base backoff unit in milliseconds")
    backoff: Backoff = Field(default=Backoff.EXPONENTIAL, description="linear or exponential")


class NeatCatchSettings(BaseSettings):
    """
    Root settings.

    Load order (highest priority first):
      1. Environment variables (NEAT_CATCH_ prefix)
      2. .env file in the working directory
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="NEAT_CATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    retry: RetryDefaults = Field(default_factory=RetryDefaults)
    log_level: str = Field(default="INFO")
    environment: str | None = Field(
        default=None,
        description="Deployment label attached by ErrorTransformers.for_logging",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Reject names the logging module does not know."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> NeatCatchSettings:
    """Load settings once; call get_settings.cache_clear() to reload."""
    return NeatCatchSettings()
