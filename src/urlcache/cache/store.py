"""
CacheFileStore: cache file access for callers that already resolved paths.

Wraps the cache file codec with:
- A cache root (relative paths resolve against it)
- A read-only switch that turns writes into no-ops
- Optional SHA-256 verification of cached content
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from urlcache.cache import cache_file
from urlcache.config import Settings, get_settings
from urlcache.exceptions import ChecksumMismatchError, ConfigurationError
from urlcache.fs import FileSystem, RealFileSystem
from urlcache.logging import get_logger
from urlcache.types import CacheEntry, CacheMetadata, unix_time

logger = get_logger(__name__)


def checksum(content: bytes | bytearray | memoryview) -> str:
    """Lowercase hex SHA-256 of ``content``."""
    return hashlib.sha256(content).hexdigest()


class CacheFileStore:
    """Reads and writes cache files under a single root directory."""

    def __init__(
        self,
        root: Path | str,
        fs: FileSystem | None = None,
        read_only: bool = False,
    ) -> None:
        """Initialize the store.

        Args:
            root: Absolute cache root directory.
            fs: Filesystem to go through. Defaults to the real disk.
            read_only: If True, set() never writes.

        Raises:
            ConfigurationError: If root is not an absolute path.
        """
        root = Path(root)
        if not root.is_absolute():
            raise ConfigurationError(
                "Cache root must be an absolute path", context={"root": str(root)}
            )
        self.root = root
        self.fs: FileSystem = fs if fs is not None else RealFileSystem()
        self.read_only = read_only

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, fs: FileSystem | None = None
    ) -> CacheFileStore:
        """Create a store from application settings."""
        settings = settings or get_settings()
        return cls(
            root=settings.cache_root,
            fs=fs if fs is not None else RealFileSystem.from_settings(settings),
            read_only=settings.READ_ONLY,
        )

    def resolve(self, path: Path | str) -> Path:
        """Resolve ``path`` against the cache root."""
        return self.root / path

    def get(
        self, path: Path | str, expected_checksum: str | None = None
    ) -> bytes | bytearray | None:
        """Get cached content.

        A disk read hands back its own ``bytearray``, already cut down to the
        content, so it is returned without copying. Content borrowed from the
        filesystem (a view over stored ``bytes``) is copied once into ``bytes``
        so the result does not pin the whole file.

        Args:
            path: Cache file path (absolute, or relative to the root).
            expected_checksum: Hex SHA-256 the content must match.

        Returns:
            The content, or None if there is no valid entry.

        Raises:
            ChecksumMismatchError: If the content does not match expected_checksum.
        """
        file_path = self.resolve(path)
        entry = self.get_entry(file_path)
        if entry is None:
            return None

        content = (
            entry.content if isinstance(entry.content, bytearray) else entry.content_bytes()
        )
        if expected_checksum is not None:
            actual = checksum(content)
            if actual != expected_checksum.lower():
                raise ChecksumMismatchError(
                    "Integrity check failed",
                    context={
                        "path": str(file_path),
                        "url": entry.metadata.url,
                        "expected": expected_checksum,
                        "actual": actual,
                    },
                )
        return content

    def get_entry(self, path: Path | str) -> CacheEntry | None:
        """Get content and metadata together."""
        return cache_file.read(self.fs, self.resolve(path))

    def get_metadata(self, path: Path | str) -> CacheMetadata | None:
        """Get the metadata of a cache file without keeping its content."""
        return cache_file.read_metadata(self.fs, self.resolve(path), CacheMetadata)

    def get_headers(self, path: Path | str) -> dict[str, str] | None:
        """Get the cached response headers."""
        metadata = self.get_metadata(path)
        return None if metadata is None else metadata.headers

    def set(
        self,
        path: Path | str,
        url: str,
        headers: dict[str, str],
        content: bytes | bytearray | memoryview,
    ) -> bool:
        """Cache ``content`` fetched from ``url``, stamped with the current time.

        Returns:
            True if the file was written, False if the store is read-only.
        """
        file_path = self.resolve(path)
        if self.read_only:
            logger.debug("Read-only cache, skipping write", path=str(file_path))
            return False

        metadata = CacheMetadata(url=url, headers=dict(headers), time=unix_time())
        cache_file.write(self.fs, file_path, content, metadata)
        return True
