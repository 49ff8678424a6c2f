"""
Core types for urlcache.

- CacheMetadata: what gets serialized into the trailer of a cache file
- CacheEntry: result of a full read (metadata + content)
- Helpers for fetch timestamps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, Field
from pydantic.dataclasses import dataclass as validated_dataclass

MAX_UNIX_TIME = 2**64 - 1


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def unix_time(moment: datetime | None = None) -> int:
    """Whole seconds since the Unix epoch for ``moment`` (defaults to now)."""
    return int((moment or utc_now()).timestamp())


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("time must be an integer, not a boolean")
    return value


# Seconds since the epoch as an unsigned 64-bit integer. Numeric strings are
# coerced; booleans and out-of-range values are rejected.
UnixTime = Annotated[int, BeforeValidator(_reject_bool), Field(ge=0, le=MAX_UNIX_TIME)]


@validated_dataclass
class CacheMetadata:
    """Metadata stored alongside cached content.

    Attributes:
        url: The URL the content was fetched from.
        headers: Response headers, in the order they were received.
        time: Fetch time as seconds since the Unix epoch, if known.

    Fields are validated on construction, so an out-of-range ``time`` raises
    ``pydantic.ValidationError`` before anything is written.
    """

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    time: UnixTime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON trailer.

        ``time`` is left out entirely when unset so that absence survives a
        write/read cycle.
        """
        data: dict[str, Any] = {
            "headers": self.headers,
            "url": self.url,
        }
        if self.time is not None:
            data["time"] = self.time
        return data

    @property
    def fetched_at(self) -> datetime | None:
        """Fetch time as an aware datetime.

        None when unset or past what ``datetime`` can represent.
        """
        if self.time is None:
            return None
        try:
            return datetime.fromtimestamp(self.time, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None


@dataclass
class CacheEntry:
    """A cache file split into its metadata and content.

    ``content`` is the read buffer narrowed to the content region: a
    ``bytearray`` truncated in place when the read handed back an owned
    buffer, or a ``memoryview`` over the original bytes when it was borrowed.
    """

    metadata: CacheMetadata
    content: bytearray | memoryview

    def content_bytes(self) -> bytes:
        """Content as an immutable ``bytes`` copy."""
        return bytes(self.content)
