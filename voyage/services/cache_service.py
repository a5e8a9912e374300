"""Request cache — Redis when configured, in-process TTL map otherwise."""

import hashlib
import json
import logging
import math
import time
from datetime import date, datetime, timezone
from typing import Any, Callable

import redis.asyncio as redis

from voyage.config import settings

logger = logging.getLogger(__name__)

# TTLs in seconds
TTL_NEAR_TERM = 2 * 60       # travel within 3 days
TTL_DEFAULT = 5 * 60         # within 2 weeks, or unknown date
TTL_FAR_FUTURE = 15 * 60     # further out
TTL_HOTEL_OFFER = 3 * 60     # single offer lookups
TTL_OFFER_FROM_SEARCH = 15 * 60
TTL_CITIES = 60


def make_key(prefix: str, params: dict) -> str:
    """Build a stable cache key from a prefix and a flat parameter dict.

    ``None`` values are dropped and keys are sorted, so two dicts holding the
    same values produce the same key regardless of insertion order.
    """
    canonical = {k: v for k, v in params.items() if v is not None}
    payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
    return f"{prefix}:{digest}"


def ttl_for_travel_date(travel_date: str | date | None, now: datetime | None = None) -> int:
    """Cache lifetime for a search, shorter the closer the travel date is."""
    if isinstance(travel_date, datetime):
        target = travel_date
    elif isinstance(travel_date, date):
        target = datetime(travel_date.year, travel_date.month, travel_date.day)
    else:
        try:
            target = datetime.fromisoformat(str(travel_date).strip()[:10])
        except (TypeError, ValueError):
            return TTL_DEFAULT
    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    days = math.ceil((target - now).total_seconds() / 86400)
    if days <= 3:
        return TTL_NEAR_TERM
    if days <= 14:
        return TTL_DEFAULT
    return TTL_FAR_FUTURE


class MemoryStore:
    """Dict of key -> (expires_at, value) with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        self._data[key] = (self._clock() + ttl, value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._data.items() if now >= expires_at]
        for k in expired:
            del self._data[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._data)


class CacheService:
    """JSON value cache with per-key TTLs."""

    def __init__(
        self,
        redis_url: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._redis_url = settings.redis_url if redis_url is None else redis_url
        self._redis: redis.Redis | None = None
        self._redis_checked = False
        self.memory = MemoryStore(clock)

    @property
    def backend(self) -> str:
        return "redis" if self._redis is not None else "memory"

    async def init(self) -> None:
        """Connect to Redis if a URL is configured; keep the memory store otherwise."""
        await self._get_redis()
        if self._redis is not None:
            logger.info("Redis cache enabled")
        else:
            logger.info("Using in-memory cache")

    async def _get_redis(self) -> redis.Redis | None:
        if self._redis is None and not self._redis_checked:
            self._redis_checked = True
            if not self._redis_url:
                return None
            try:
                self._redis = redis.from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, falling back to memory cache: {e}")
                self._redis = None
        return self._redis

    async def get(self, key: str) -> Any | None:
        """Get a value from cache. Returns None on miss or error."""
        r = await self._get_redis()
        if r is None:
            return self.memory.get(key)
        try:
            raw = await r.get(key)
        except Exception as e:
            logger.warning(f"Redis get failed for {key}: {e}")
            return None
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int = TTL_DEFAULT) -> bool:
        """Set a value in cache with TTL. Returns False on error."""
        r = await self._get_redis()
        if r is None:
            self.memory.set(key, value, ttl)
            return True
        try:
            await r.set(key, json.dumps(value, default=str), ex=ttl)
            return True
        except Exception as e:
            logger.warning(f"Redis set failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        r = await self._get_redis()
        if r is None:
            self.memory.delete(key)
            return True
        try:
            await r.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Redis delete failed for {key}: {e}")
            return False

    def purge_expired(self) -> int:
        """Drop expired in-memory entries; Redis expires its own keys."""
        return self.memory.purge_expired()

    # Typed helpers

    def hotel_search_key(self, query: dict) -> str:
        return make_key("hotelOffers", query)

    def hotel_offer_key(self, offer_id: str) -> str:
        return make_key("hotelOffer", {"offerId": offer_id})

    def hotel_ids_key(self, source: str, params: dict) -> str:
        return make_key(f"hotelIds:{source}", params)

    def flight_search_key(self, query: dict) -> str:
        return make_key("flightOffers", query)

    def cities_key(self, q: str, limit: int) -> str:
        return f"cities:{q.upper()}|{limit}"

    def conversation_key(self, conversation_id: str) -> str:
        return f"conversation:{conversation_id}"

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None
        self._redis_checked = False


cache_service = CacheService()
