"""
Cache package for single-file cache entries.

- cache_file.py: the file format (content + JSON metadata trailer)
- store.py: CacheFileStore, path resolution, read-only mode, checksums
"""

from urlcache.cache.cache_file import (
    LAST_LINE_PREFIX,
    estimate_metadata_capacity,
    read,
    read_metadata,
    split_content_metadata,
    write,
)
from urlcache.cache.store import CacheFileStore, checksum

__all__ = [
    "LAST_LINE_PREFIX",
    "CacheFileStore",
    "checksum",
    "estimate_metadata_capacity",
    "read",
    "read_metadata",
    "split_content_metadata",
    "write",
]
