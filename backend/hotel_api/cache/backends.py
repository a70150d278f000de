"""Key/value cache backends with per-entry TTL."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis  # type: ignore[import-untyped]
from cachetools import TTLCache
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    """Minimal contract the search orchestrator relies on."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisCache:
    """Redis-backed cache sharing one connection pool per process."""

    def __init__(self, url: str, *, retries: int = 3) -> None:
        self._url = url
        self._retries = retries
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        if self._client is not None:
            return
        self._client = redis.from_url(
            self._url,
            encoding="utf-8",
            decode_responses=True,
            retry=Retry(ExponentialBackoff(cap=1.0, base=0.05), self._retries),
            retry_on_error=[RedisConnectionError, RedisTimeoutError],
            health_check_interval=30,
        )
        logger.info("Redis cache pool created")

    async def close(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.aclose()

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Redis cache is not connected")
        return self._client

    async def get(self, key: str) -> str | None:
        return await self._require_client().get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._require_client().set(key, value, ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._require_client().delete(key)


class MemoryCache:
    """In-process TTL cache for local development and tests.

    ``timer`` defaults to ``time.monotonic`` and can be replaced to simulate
    the clock moving forward.
    """

    def __init__(
        self,
        *,
        maxsize: int = 2048,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._maxsize = maxsize
        self._timer = timer
        self._entries: dict[int, TTLCache] = {}

    def _bucket(self, ttl_seconds: int) -> TTLCache:
        bucket = self._entries.get(ttl_seconds)
        if bucket is None:
            bucket = TTLCache(maxsize=self._maxsize, ttl=ttl_seconds, timer=self._timer)
            self._entries[ttl_seconds] = bucket
        return bucket

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        self._entries.clear()

    async def get(self, key: str) -> str | None:
        for bucket in self._entries.values():
            value = bucket.get(key)
            if value is not None:
                return value
        return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.delete(key)
        self._bucket(ttl_seconds)[key] = value

    async def delete(self, key: str) -> None:
        for bucket in self._entries.values():
            bucket.pop(key, None)
