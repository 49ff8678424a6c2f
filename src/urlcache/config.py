"""
Configuration management using pydantic-settings.

Loads configuration from environment variables (prefixed with URLCACHE_)
and .env files. Validates fields and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Optional:
        URLCACHE_CACHE_DIR: Root directory that relative cache paths resolve against
        URLCACHE_READ_ONLY: Skip all writes (reads still work)
        URLCACHE_ATOMIC_WRITE_ATTEMPTS: Attempts for the temp-file + rename write
        URLCACHE_ATOMIC_WRITE_MAX_WAIT_SECONDS: Upper bound of the randomized backoff
        URLCACHE_LOG_LEVEL: Logging level
    """

    model_config = SettingsConfigDict(
        env_prefix="URLCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Directories
    CACHE_DIR: Path = Field(default=Path(".cache"), description="Cache root directory")

    # Write behaviour
    READ_ONLY: bool = Field(default=False, description="Never write cache files")
    ATOMIC_WRITE_ATTEMPTS: int = Field(
        default=5, ge=1, le=20, description="Attempts for each atomic write"
    )
    ATOMIC_WRITE_MAX_WAIT_SECONDS: float = Field(
        default=0.1, ge=0.0, le=10.0, description="Maximum backoff between attempts"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def cache_root(self) -> Path:
        """Absolute cache root (CACHE_DIR resolved against the working directory)."""
        return self.CACHE_DIR.expanduser().resolve()

    def ensure_directories(self) -> None:
        """Create the cache directory if it doesn't exist."""
        self.cache_root.mkdir(parents=True, exist_ok=True)

    def display(self) -> dict[str, str | int | float | bool]:
        """Return settings as a flat dict for display."""
        return {
            "CACHE_DIR": str(self.cache_root),
            "READ_ONLY": self.READ_ONLY,
            "ATOMIC_WRITE_ATTEMPTS": self.ATOMIC_WRITE_ATTEMPTS,
            "ATOMIC_WRITE_MAX_WAIT_SECONDS": self.ATOMIC_WRITE_MAX_WAIT_SECONDS,
            "LOG_LEVEL": self.LOG_LEVEL,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
