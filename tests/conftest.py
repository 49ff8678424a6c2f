"""
Pytest configuration and fixtures for urlcache tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from urlcache.config import Settings, clear_settings_cache
from urlcache.fs import InMemoryFileSystem, RealFileSystem


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def sleeps() -> list[float]:
    """Collects backoff waits instead of sleeping."""
    return []


@pytest.fixture
def real_fs(sleeps: list[float]) -> RealFileSystem:
    """Disk-backed filesystem that records backoff instead of sleeping."""
    return RealFileSystem(attempts=3, max_wait_seconds=0.05, sleep=sleeps.append)


@pytest.fixture
def memory_fs() -> InMemoryFileSystem:
    """Dict-backed filesystem (reads hand out borrowed bytes)."""
    return InMemoryFileSystem()


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "URLCACHE_CACHE_DIR": str(temp_dir / "cache"),
        "URLCACHE_READ_ONLY": "false",
        "URLCACHE_ATOMIC_WRITE_ATTEMPTS": "3",
        "URLCACHE_ATOMIC_WRITE_MAX_WAIT_SECONDS": "0",
        "URLCACHE_LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str]) -> Generator[Settings, None, None]:
    """Provide a Settings instance with the cache directory under temp_dir."""
    from urlcache.config import get_settings

    settings = get_settings()
    settings.ensure_directories()
    yield settings
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
