"""
SDK configuration using Pydantic Settings.

This module provides typed and validated settings for the Topsort client,
with support for environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://topsort.com"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TopsortSettings(BaseSettings):
    """Topsort API settings."""

    model_config = SettingsConfigDict(env_prefix="TOPSORT_")

    marketplace: str = Field(default="", description="Marketplace identifier")
    api_key: SecretStr = Field(default=SecretStr(""), description="Topsort API key")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Topsort API base URL")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended to it."""
        return v.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """Check if Topsort credentials are configured."""
        return bool(self.marketplace and self.api_key.get_secret_value())


class LoggingSettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Minimum log level")
    json_format: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept level names case-insensitively."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"Invalid log level: {v}. Must be one of {list(LOG_LEVELS)}"
            raise ValueError(msg)
        return level


class Settings(BaseSettings):
    """
    Main SDK settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Runtime environment"
    )

    # Sub-settings
    topsort: TopsortSettings = Field(default_factory=TopsortSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached SDK settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Configured Settings instance.
    """
    return Settings()
