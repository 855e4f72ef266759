"""
Cache Infrastructure

TTL result cache for search, suggestion, remote-source and sitemap artifacts.
"""

from .result_cache import (
    CacheEntry,
    CacheFamily,
    CacheStats,
    ResultCache,
    make_cache_key,
    normalize_query,
)

__all__ = [
    "ResultCache",
    "CacheEntry",
    "CacheFamily",
    "CacheStats",
    "make_cache_key",
    "normalize_query",
]
