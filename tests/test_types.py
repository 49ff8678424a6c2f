"""
Tests for core types.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from urlcache.types import MAX_UNIX_TIME, CacheEntry, CacheMetadata, unix_time


class TestCacheMetadata:
    """Tests for CacheMetadata serialization."""

    def test_to_dict_without_time(self) -> None:
        """Test time is omitted when unset."""
        metadata = CacheMetadata(url="https://x/y")

        assert metadata.to_dict() == {"headers": {}, "url": "https://x/y"}

    def test_to_dict_with_time(self) -> None:
        """Test time is included when set."""
        metadata = CacheMetadata(url="u", headers={"a": "b"}, time=0)

        assert metadata.to_dict() == {"headers": {"a": "b"}, "url": "u", "time": 0}

    def test_fetched_at(self) -> None:
        """Test the fetch time converts to an aware datetime."""
        assert CacheMetadata(url="u").fetched_at is None
        assert CacheMetadata(url="u", time=86400).fetched_at == datetime(
            1970, 1, 2, tzinfo=timezone.utc
        )

    def test_fetched_at_out_of_range(self) -> None:
        """Test a time past datetime's range has no datetime."""
        assert CacheMetadata(url="u", time=MAX_UNIX_TIME).fetched_at is None

    @pytest.mark.parametrize("time", [-1, -5, MAX_UNIX_TIME + 1, True, False])
    def test_invalid_time_rejected(self, time: object) -> None:
        """Test negative, oversized and boolean times fail on construction."""
        with pytest.raises(ValidationError):
            CacheMetadata(url="u", time=time)

    def test_time_bounds_accepted(self) -> None:
        """Test both ends of the unsigned 64-bit range are valid."""
        assert CacheMetadata(url="u", time=0).time == 0
        assert CacheMetadata(url="u", time=MAX_UNIX_TIME).time == MAX_UNIX_TIME

    def test_unix_time(self) -> None:
        """Test unix_time truncates to whole seconds."""
        moment = datetime(2024, 4, 5, 12, 0, 0, 900000, tzinfo=timezone.utc)

        assert unix_time(moment) == 1712318400


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_content_bytes_from_view(self) -> None:
        """Test a borrowed view converts to bytes."""
        entry = CacheEntry(metadata=CacheMetadata(url="u"), content=memoryview(b"abc")[1:])

        assert entry.content_bytes() == b"bc"

    def test_content_bytes_from_bytearray(self) -> None:
        """Test an owned buffer converts to bytes."""
        entry = CacheEntry(metadata=CacheMetadata(url="u"), content=bytearray(b"abc"))

        assert entry.content_bytes() == b"abc"
