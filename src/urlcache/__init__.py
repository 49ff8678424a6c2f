"""
urlcache - durable single-file cache entries for fetched URLs.

Each cache file holds the raw content followed by a JSON metadata trailer
(source URL, response headers, fetch time).
"""

__version__ = "0.1.0"
