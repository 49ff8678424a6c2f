"""
Custom exception hierarchy for urlcache.

All exceptions inherit from UrlCacheError, which provides optional context
for structured error handling and logging.

Filesystem failures are not wrapped: OSError propagates to the caller as-is.
"""

from __future__ import annotations

from typing import Any


class UrlCacheError(Exception):
    """Base exception for all urlcache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(UrlCacheError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Cache root that is not an absolute path
    """

    pass


class ChecksumMismatchError(UrlCacheError):
    """Raised when cached content does not match the expected checksum.

    Context should include:
        - path: The cache file that was read
        - expected: The checksum the caller asked for
        - actual: The SHA-256 of the content on disk
    """

    pass
