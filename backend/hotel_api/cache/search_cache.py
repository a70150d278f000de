"""Tolerant cache-aside wrapper used by the search orchestrator."""

from __future__ import annotations

import json
import logging
from typing import Any

from hotel_api.cache.backends import CacheBackend

logger = logging.getLogger(__name__)

AUTOSUGGEST_PREFIX = "autosuggest"
HOTEL_SEARCH_PREFIX = "hotels_search"


def autosuggest_key(term: str) -> str:
    return f"{AUTOSUGGEST_PREFIX}:{term}"


def hotel_search_key(search: dict[str, Any]) -> str:
    """Build the cache key for a hotel search.

    The transaction identifier is left out so identical searches made under
    different supplier conversations share one entry.
    """
    canonical = {
        key: value
        for key, value in search.items()
        if key != "transaction_identifier"
    }
    return f"{HOTEL_SEARCH_PREFIX}:{json.dumps(canonical, sort_keys=True, separators=(',', ':'))}"


class SearchCache:
    """JSON cache whose failures never reach the caller."""

    def __init__(self, backend: CacheBackend) -> None:
        self.backend = backend

    async def connect(self) -> None:
        try:
            await self.backend.connect()
        except Exception:
            logger.exception("Cache backend failed to connect; continuing uncached")

    async def close(self) -> None:
        try:
            await self.backend.close()
        except Exception:
            logger.exception("Failed to close cache backend")

    async def get_json(self, key: str) -> Any | None:
        try:
            raw = await self.backend.get(key)
        except Exception:
            logger.exception("Cache read failed for %s", key)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry %s", key)
            await self.delete(key)
            return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self.backend.set(key, json.dumps(value), ttl_seconds)
        except Exception:
            logger.exception("Cache write failed for %s", key)

    async def delete(self, key: str) -> None:
        try:
            await self.backend.delete(key)
        except Exception:
            logger.exception("Cache delete failed for %s", key)
