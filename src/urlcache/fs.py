"""
Filesystem capability used by the cache file codec.

The codec never touches the disk directly; it is handed a FileSystem that
can read a whole file and atomically replace one. Two implementations:

- RealFileSystem: disk-backed. Reads return an owned ``bytearray``. Writes
  go to a random-suffixed temp file beside the target, which is then renamed
  over it, retried with randomized exponential backoff (tenacity). The
  temp-name suffix comes from an injectable ``token_hex``; the backoff jitter
  is drawn by tenacity from the module-level ``random`` and is not injectable.
- InMemoryFileSystem: dict-backed. Reads return the stored ``bytes`` as-is,
  so callers get a borrowed buffer.
"""

from __future__ import annotations

import errno
import os
import secrets
import time
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Protocol

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from urlcache.logging import get_logger

if TYPE_CHECKING:
    from urlcache.config import Settings

logger = get_logger(__name__)

# Permission mode applied to every cache file
CACHE_PERM = 0o644

# Bytes of randomness in temp file suffixes
_TEMP_SUFFIX_BYTES = 10


class FileSystem(Protocol):
    """What the cache file codec needs from the filesystem."""

    def read_file_bytes(self, path: Path) -> bytes | bytearray:
        """Read a whole file. Raises FileNotFoundError if it does not exist."""
        ...

    def atomic_write_file_with_retries(
        self, path: Path, data: bytes | bytearray, mode: int
    ) -> None:
        """Replace ``path`` with ``data`` so readers never see a partial file."""
        ...


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug(
        "Atomic write failed, retrying",
        attempt=retry_state.attempt_number,
        error=repr(exc),
    )


class RealFileSystem:
    """Disk-backed FileSystem."""

    def __init__(
        self,
        attempts: int = 5,
        max_wait_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
        token_hex: Callable[[int], str] = secrets.token_hex,
    ) -> None:
        """Initialize the filesystem.

        Args:
            attempts: Total attempts for each atomic write.
            max_wait_seconds: Upper bound of the randomized backoff between attempts.
            sleep: Sleep primitive used between attempts.
            token_hex: Source of the random temp file name suffix. It does
                not affect backoff jitter, which tenacity draws itself.
        """
        self.attempts = attempts
        self.max_wait_seconds = max_wait_seconds
        self._sleep = sleep
        self._token_hex = token_hex

    @classmethod
    def from_settings(cls, settings: Settings) -> RealFileSystem:
        """Build a filesystem using the configured retry budget."""
        return cls(
            attempts=settings.ATOMIC_WRITE_ATTEMPTS,
            max_wait_seconds=settings.ATOMIC_WRITE_MAX_WAIT_SECONDS,
        )

    def read_file_bytes(self, path: Path) -> bytearray:
        """Read a whole file into a freshly allocated buffer the caller owns."""
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            buf = bytearray(size)
            read = f.readinto(buf)
            if read < size:
                # File shrank between stat and read
                del buf[read:]
            else:
                buf.extend(f.read())
        return buf

    def atomic_write_file_with_retries(
        self, path: Path, data: bytes | bytearray, mode: int
    ) -> None:
        """Atomically write ``data`` to ``path``, retrying transient failures.

        Raises:
            OSError: The error from the last attempt, unchanged.
        """
        retrying = Retrying(
            retry=retry_if_exception_type(OSError),
            wait=wait_random_exponential(multiplier=0.01, max=self.max_wait_seconds),
            stop=stop_after_attempt(self.attempts),
            sleep=self._sleep,
            before_sleep=_log_retry,
            reraise=True,
        )
        retrying(self.atomic_write_file, Path(path), data, mode)

    def atomic_write_file(self, path: Path, data: bytes | bytearray, mode: int) -> None:
        """Write to a temp file beside ``path`` and rename it into place."""
        temp_path = path.with_name(f"{path.name}.{self._token_hex(_TEMP_SUFFIX_BYTES)}")
        try:
            self._write_temp(temp_path, data, mode)
        except FileNotFoundError:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_temp(temp_path, data, mode)

        try:
            os.replace(temp_path, path)
        except OSError:
            with suppress(OSError):
                temp_path.unlink()
            raise

    @staticmethod
    def _write_temp(temp_path: Path, data: bytes | bytearray, mode: int) -> None:
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # open() honours the umask; cache files always get exactly ``mode``
            os.chmod(temp_path, mode)
        except OSError:
            with suppress(OSError):
                temp_path.unlink()
            raise


class InMemoryFileSystem:
    """Dict-backed FileSystem.

    Stored files are immutable ``bytes``; reads hand them out without copying.
    """

    def __init__(self, files: dict[Path, bytes] | None = None) -> None:
        self.files: dict[Path, bytes] = {
            Path(path): bytes(data) for path, data in (files or {}).items()
        }
        self.modes: dict[Path, int] = {}

    def read_file_bytes(self, path: Path) -> bytes:
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(
                errno.ENOENT, os.strerror(errno.ENOENT), str(path)
            ) from None

    def atomic_write_file_with_retries(
        self, path: Path, data: bytes | bytearray, mode: int
    ) -> None:
        self.files[Path(path)] = bytes(data)
        self.modes[Path(path)] = mode
