"""
Single-file cache entries: content followed by a JSON metadata trailer.

File format::

    <content>\\n// denoCacheMetadata=<metadata json><EOF>

The trailer always starts at the last newline in the file, so content may
contain newlines of its own. A file whose last line is not a trailer, or
whose trailer does not parse, reads as "no entry" rather than an error.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar, overload

import orjson
from pydantic import TypeAdapter, ValidationError

from urlcache.fs import CACHE_PERM, FileSystem
from urlcache.logging import get_logger, log_context
from urlcache.types import CacheEntry, CacheMetadata

logger = get_logger(__name__)

LAST_LINE_PREFIX = b"\n// denoCacheMetadata="

# Slack added on top of the per-field estimate
_CAPACITY_OVERESTIMATE = 128

M = TypeVar("M")


def _json_str_len(value: str) -> int:
    """Upper bound on the byte length of ``value`` inside a JSON string."""
    escaped = sum(1 for ch in value if ch < " " or ch in '"\\')
    # Worst case escape is \u00XX: one source byte becomes six
    return len(value.encode("utf-8")) + 5 * escaped


def estimate_metadata_capacity(metadata: CacheMetadata) -> int:
    """Over-estimate the serialized size of ``metadata`` in bytes."""
    return (
        sum(_json_str_len(k) + _json_str_len(v) + 6 for k, v in metadata.headers.items())
        + _json_str_len(metadata.url)
        + (14 if metadata.time is not None else 0)
        + _CAPACITY_OVERESTIMATE
    )


def write(
    fs: FileSystem,
    path: Path,
    content: bytes | bytearray | memoryview,
    metadata: CacheMetadata,
) -> None:
    """Write ``content`` and ``metadata`` to ``path`` as one cache file.

    Any previous file at ``path`` is replaced atomically.

    Raises:
        OSError: If the atomic write fails after its retries.
    """
    capacity = len(content) + len(LAST_LINE_PREFIX) + estimate_metadata_capacity(metadata)
    serialized = orjson.dumps(metadata.to_dict())
    result = b"".join((content, LAST_LINE_PREFIX, serialized))
    assert len(result) < capacity, f"{len(result)} < {capacity}"

    with log_context(cache_path=path, operation="write"):
        fs.atomic_write_file_with_retries(path, result, CACHE_PERM)
        logger.debug("Wrote cache file", size=len(result), url=metadata.url)


def read(fs: FileSystem, path: Path) -> CacheEntry | None:
    """Read a cache file's content and metadata.

    Returns:
        The entry, or None if the file is missing or malformed.

    Raises:
        OSError: For I/O failures other than the file not existing.
    """
    with log_context(cache_path=path, operation="read"):
        file_bytes = _read_file(fs, path)
        if file_bytes is None:
            return None

        parsed = _read_content_and_metadata(file_bytes, CacheMetadata)
        if parsed is None:
            return None
        content_len, metadata = parsed

        # Narrow the read buffer to just the content
        content: bytearray | memoryview
        if isinstance(file_bytes, bytearray):
            del file_bytes[content_len:]
            content = file_bytes
        else:
            content = memoryview(file_bytes)[:content_len]

        return CacheEntry(metadata=metadata, content=content)


@overload
def read_metadata(fs: FileSystem, path: Path) -> CacheMetadata | None: ...


@overload
def read_metadata(fs: FileSystem, path: Path, shape: type[M]) -> M | None: ...


@overload
def read_metadata(fs: FileSystem, path: Path, shape: Any) -> Any | None: ...


def read_metadata(
    fs: FileSystem,
    path: Path,
    shape: Any = CacheMetadata,
) -> Any | None:
    """Read only the metadata trailer of a cache file.

    Args:
        fs: Filesystem to read through.
        path: Cache file path.
        shape: Type to validate the trailer JSON into. Anything pydantic's
            TypeAdapter accepts works (dataclass, BaseModel, TypedDict, dict).

    Returns:
        The validated metadata, or None if the file is missing or malformed.

    Raises:
        OSError: For I/O failures other than the file not existing.
    """
    with log_context(cache_path=path, operation="read_metadata"):
        file_bytes = _read_file(fs, path)
        if file_bytes is None:
            return None

        parsed = _read_content_and_metadata(file_bytes, shape)
        if parsed is None:
            return None
        return parsed[1]


def _read_file(fs: FileSystem, path: Path) -> bytes | bytearray | None:
    try:
        return fs.read_file_bytes(path)
    except FileNotFoundError:
        return None


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def _read_content_and_metadata(
    file_bytes: bytes | bytearray, shape: type[M] | Any
) -> tuple[int, M] | None:
    """Split and validate; returns the content length and the metadata."""
    parts = split_content_metadata(file_bytes)
    if parts is None:
        logger.debug("No metadata trailer", size=len(file_bytes))
        return None

    content, metadata_bytes = parts
    with content, metadata_bytes:
        try:
            metadata = _adapter(shape).validate_json(metadata_bytes.tobytes())
        except ValidationError as e:
            logger.debug("Invalid metadata trailer", errors=e.error_count())
            return None
        return len(content), metadata


def split_content_metadata(
    file_bytes: bytes | bytearray,
) -> tuple[memoryview, memoryview] | None:
    """Split a cache file at its last newline.

    Returns:
        Views over the content and over the metadata payload (the bytes after
        the trailer marker), or None if the last line is not a trailer.
    """
    last_newline_index = file_bytes.rfind(b"\n")
    if last_newline_index == -1:
        return None
    if not file_bytes.startswith(LAST_LINE_PREFIX, last_newline_index):
        return None

    view = memoryview(file_bytes)
    content = view[:last_newline_index]
    metadata = view[last_newline_index + len(LAST_LINE_PREFIX) :]
    view.release()
    return content, metadata
