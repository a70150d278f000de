"""Cache layer behaviour."""

from __future__ import annotations

import pytest

from hotel_api.cache import MemoryCache, SearchCache, hotel_search_key
from supplier_fakes import FakeClock

pytestmark = pytest.mark.asyncio


class BrokenBackend:
    async def connect(self) -> None:
        raise ConnectionError("cache down")

    async def close(self) -> None:
        raise ConnectionError("cache down")

    async def get(self, key: str) -> str | None:
        raise ConnectionError("cache down")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise ConnectionError("cache down")

    async def delete(self, key: str) -> None:
        raise ConnectionError("cache down")


async def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = SearchCache(MemoryCache(timer=clock))
    key = hotel_search_key({"type": "city", "id": "1"})

    await cache.set_json(key, {"data": {"totalHotelsCount": 1}}, 300)
    clock.advance(299)
    assert await cache.get_json(key) == {"data": {"totalHotelsCount": 1}}

    clock.advance(2)
    assert await cache.get_json(key) is None


async def test_ttls_are_independent() -> None:
    clock = FakeClock()
    cache = SearchCache(MemoryCache(timer=clock))

    await cache.set_json("autosuggest:goa", ["goa"], 7200)
    await cache.set_json("hotels_search:x", {"ok": True}, 300)
    clock.advance(600)

    assert await cache.get_json("autosuggest:goa") == ["goa"]
    assert await cache.get_json("hotels_search:x") is None


async def test_failures_never_reach_caller() -> None:
    cache = SearchCache(BrokenBackend())

    await cache.connect()
    assert await cache.get_json("autosuggest:goa") is None
    await cache.set_json("autosuggest:goa", ["goa"], 60)
    await cache.delete("autosuggest:goa")
    await cache.close()


async def test_undecodable_entry_is_discarded() -> None:
    backend = MemoryCache()
    cache = SearchCache(backend)
    await backend.set("autosuggest:goa", "{not json", 60)

    assert await cache.get_json("autosuggest:goa") is None
    assert await backend.get("autosuggest:goa") is None


def test_search_key_ignores_transaction_identifier() -> None:
    first = hotel_search_key({"id": "1", "type": "city", "transaction_identifier": "a"})
    second = hotel_search_key({"type": "city", "id": "1", "transaction_identifier": "b"})
    assert first == second
    assert first.startswith("hotels_search:")
