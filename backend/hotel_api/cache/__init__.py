"""Cache layer used to memoise supplier lookups."""

from hotel_api.cache.backends import CacheBackend, MemoryCache, RedisCache
from hotel_api.cache.search_cache import (
    SearchCache,
    autosuggest_key,
    hotel_search_key,
)
from hotel_api.core.config import Settings


def build_search_cache(settings: Settings) -> SearchCache:
    """Create the process-wide cache selected by configuration."""
    if settings.cache_backend == "memory" or not settings.redis_url:
        backend: CacheBackend = MemoryCache(maxsize=settings.cache_max_entries)
    else:
        backend = RedisCache(settings.redis_url)
    return SearchCache(backend)


__all__ = [
    "CacheBackend",
    "MemoryCache",
    "RedisCache",
    "SearchCache",
    "autosuggest_key",
    "build_search_cache",
    "hotel_search_key",
]
