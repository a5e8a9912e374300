from datetime import datetime, timezone

import pytest
import redis.asyncio as redis

from conftest import FakeClock
from voyage.services.cache_service import (
    TTL_DEFAULT,
    TTL_FAR_FUTURE,
    TTL_NEAR_TERM,
    CacheService,
    MemoryStore,
    make_key,
    ttl_for_travel_date,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_make_key_ignores_param_order():
    a = make_key("hotelOffers", {"cityCode": "PAR", "adults": "2", "checkInDate": "2026-11-01"})
    b = make_key("hotelOffers", {"checkInDate": "2026-11-01", "adults": "2", "cityCode": "PAR"})
    assert a == b
    assert a.startswith("hotelOffers:")


def test_make_key_drops_none_and_distinguishes_values():
    assert make_key("p", {"a": 1, "b": None}) == make_key("p", {"a": 1})
    assert make_key("p", {"a": 1}) != make_key("p", {"a": 2})
    assert make_key("p", {"a": 1}) != make_key("q", {"a": 1})


def test_memory_store_expires_after_ttl():
    clock = FakeClock()
    store = MemoryStore(clock)
    store.set("k", {"v": 1}, ttl=10)

    clock.advance(9.9)
    assert store.get("k") == {"v": 1}

    clock.advance(0.1)
    assert store.get("k") is None
    assert len(store) == 0


def test_purge_expired_removes_only_stale_entries():
    clock = FakeClock()
    store = MemoryStore(clock)
    store.set("short", 1, ttl=5)
    store.set("long", 2, ttl=50)

    clock.advance(10)
    assert store.purge_expired() == 1
    assert store.get("long") == 2


async def test_hotel_offers_entry_lifecycle():
    clock = FakeClock()
    cache = CacheService(redis_url="", clock=clock)
    key = cache.hotel_search_key({"cityCode": "PAR", "checkInDate": "2026-11-01"})

    assert await cache.get(key) is None
    await cache.set(key, {"data": [1, 2]}, TTL_DEFAULT)
    assert await cache.get(key) == {"data": [1, 2]}

    clock.advance(TTL_DEFAULT)
    assert await cache.get(key) is None


async def test_delete_removes_entry():
    cache = CacheService(redis_url="")
    await cache.set("conversation:abc", [{"role": "user", "content": "hi"}])
    await cache.delete("conversation:abc")
    assert await cache.get("conversation:abc") is None


@pytest.mark.parametrize(
    "travel_date, expected",
    [
        ("2026-10-19", TTL_NEAR_TERM),
        ("2026-10-21", TTL_NEAR_TERM),
        ("2026-10-25", TTL_DEFAULT),
        ("2026-11-01", TTL_DEFAULT),
        ("2026-12-24", TTL_FAR_FUTURE),
        ("2025-01-01", TTL_NEAR_TERM),
        ("not-a-date", TTL_DEFAULT),
        (None, TTL_DEFAULT),
    ],
)
def test_ttl_for_travel_date(travel_date, expected):
    assert ttl_for_travel_date(travel_date, now=NOW) == expected


def test_ttl_policy_values():
    assert (TTL_NEAR_TERM, TTL_DEFAULT, TTL_FAR_FUTURE) == (120, 300, 900)


async def test_unreachable_redis_falls_back_to_memory():
    cache = CacheService(redis_url="redis://127.0.0.1:1/0")
    await cache.init()

    assert cache.backend == "memory"
    await cache.set("k", "v")
    assert await cache.get("k") == "v"
    await cache.close()


class BrokenRedis:
    async def get(self, key):
        raise redis.ConnectionError("down")

    async def set(self, key, value, ex=None):
        raise redis.ConnectionError("down")

    async def delete(self, key):
        raise redis.ConnectionError("down")


async def test_redis_errors_are_swallowed_as_misses():
    cache = CacheService(redis_url="redis://cache:6379/0")
    cache._redis = BrokenRedis()
    cache._redis_checked = True

    assert cache.backend == "redis"
    assert await cache.get("k") is None
    assert await cache.set("k", "v") is False
    assert await cache.delete("k") is False
