"""
Tests for structured logging.
"""

from __future__ import annotations

import json
import logging

from urlcache.logging import (
    JSONFormatter,
    get_cache_path,
    get_logger,
    get_operation,
    log_context,
)


class TestLogContext:
    """Tests for scoped logging context."""

    def test_context_is_scoped(self) -> None:
        """Test values are set inside the block and restored after."""
        assert get_cache_path() is None
        with log_context(cache_path="/tmp/entry", operation="read"):
            assert get_cache_path() == "/tmp/entry"
            assert get_operation() == "read"
            with log_context(operation="write"):
                assert get_cache_path() == "/tmp/entry"
                assert get_operation() == "write"
            assert get_operation() == "read"
        assert get_cache_path() is None
        assert get_operation() is None


class TestJSONFormatter:
    """Tests for JSON log lines."""

    def test_includes_context_and_extra(self) -> None:
        """Test context variables and extras end up in the JSON."""
        record = logging.LogRecord("urlcache.test", logging.INFO, __file__, 1, "hello", None, None)
        record.extra = {"size": 5}

        with log_context(cache_path="/c/e", operation="write"):
            line = JSONFormatter().format(record)

        data = json.loads(line)
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["cache_path"] == "/c/e"
        assert data["operation"] == "write"
        assert data["extra"] == {"size": 5}


class TestGetLogger:
    """Tests for the logger factory."""

    def test_names_are_namespaced(self) -> None:
        """Test loggers live under the urlcache namespace."""
        assert get_logger("something").name == "urlcache.something"
        assert get_logger("urlcache.fs").name == "urlcache.fs"
