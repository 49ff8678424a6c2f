"""
Tests for configuration module.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from urlcache.config import Settings, clear_settings_cache, get_settings


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_settings_loads_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test that settings correctly loads from environment variables."""
        settings = get_settings()

        assert settings.CACHE_DIR == Path(mock_env_vars["URLCACHE_CACHE_DIR"])
        assert settings.READ_ONLY is False
        assert settings.ATOMIC_WRITE_ATTEMPTS == 3
        assert settings.ATOMIC_WRITE_MAX_WAIT_SECONDS == 0.0
        assert settings.LOG_LEVEL == "DEBUG"

    def test_attempts_must_be_positive(self) -> None:
        """Test that zero write attempts is rejected."""
        with patch.dict(os.environ, {"URLCACHE_ATOMIC_WRITE_ATTEMPTS": "0"}, clear=False):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_max_wait_bounded(self) -> None:
        """Test that the backoff cap has an upper bound."""
        with patch.dict(
            os.environ, {"URLCACHE_ATOMIC_WRITE_MAX_WAIT_SECONDS": "60"}, clear=False
        ):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_log_level_case_insensitive(self) -> None:
        """Test lower-case log levels are normalized."""
        with patch.dict(os.environ, {"URLCACHE_LOG_LEVEL": "warning"}, clear=False):
            settings = Settings(_env_file=None)

        assert settings.LOG_LEVEL == "WARNING"

    def test_invalid_log_level(self) -> None:
        """Test unknown log levels are rejected."""
        with patch.dict(os.environ, {"URLCACHE_LOG_LEVEL": "LOUD"}, clear=False):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestSettingsDefaults:
    """Tests for Settings default values."""

    def test_defaults(self) -> None:
        """Test default values with a clean environment."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.CACHE_DIR == Path(".cache")
        assert settings.READ_ONLY is False
        assert settings.ATOMIC_WRITE_ATTEMPTS == 5
        assert settings.ATOMIC_WRITE_MAX_WAIT_SECONDS == 0.1
        assert settings.LOG_LEVEL == "INFO"

    def test_cache_root_is_absolute(self) -> None:
        """Test a relative CACHE_DIR resolves to an absolute root."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cache_root.is_absolute()
        assert settings.cache_root == (Path.cwd() / ".cache").resolve()


class TestSettingsHelpers:
    """Tests for helper methods."""

    def test_ensure_directories(self, mock_env_vars: dict[str, str]) -> None:
        """Test the cache directory is created."""
        settings = get_settings()
        settings.ensure_directories()

        assert Path(mock_env_vars["URLCACHE_CACHE_DIR"]).is_dir()

    def test_display(self, mock_env_vars: dict[str, str]) -> None:
        """Test display lists every setting."""
        display = get_settings().display()

        assert set(display) == {
            "CACHE_DIR",
            "READ_ONLY",
            "ATOMIC_WRITE_ATTEMPTS",
            "ATOMIC_WRITE_MAX_WAIT_SECONDS",
            "LOG_LEVEL",
        }

    def test_get_settings_is_cached(self, mock_env_vars: dict[str, str]) -> None:
        """Test get_settings returns the same instance until cleared."""
        first = get_settings()
        assert get_settings() is first

        clear_settings_cache()
        assert get_settings() is not first
