"""
Live Reviews API - Response Cache

Time-boxed cache for aggregated responses, stored in Redis when available
with an in-memory fallback.
"""

import redis.asyncio as redis
from typing import Awaitable, Callable, Dict, Optional, Union
import asyncio
import json
import logging
import time

from live_reviews.api.schemas import AggregatedResponse

logger = logging.getLogger(__name__)


class InMemoryCache:
    """Fallback in-memory cache when Redis is unavailable."""

    def __init__(self):
        self._data: dict = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def aclose(self) -> None:
        self._data.clear()


CacheBackend = Union[redis.Redis, InMemoryCache]


async def create_cache_backend(redis_url: Optional[str]) -> CacheBackend:
    """Connect to Redis, falling back to memory when unset or unreachable."""
    if not redis_url:
        logger.info("No Redis URL configured, using in-memory cache")
        return InMemoryCache()

    client = redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True
    )
    try:
        await client.ping()
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        await client.aclose()
        return InMemoryCache()

    logger.info("Connected to Redis")
    return client


class ResponseCache:
    """
    Caches aggregated responses per key with a fixed TTL.

    Entries are replaced wholesale and only checked for staleness on read.
    Concurrent misses for the same key share a single in-flight refresh; its
    failure reaches every waiter and the stale entry is not served instead.
    """

    def __init__(
        self,
        backend: CacheBackend,
        ttl: float = 600,
        clock: Callable[[], float] = time.time
    ):
        self.backend = backend
        self.ttl = ttl
        self._clock = clock
        self._lock = asyncio.Lock()
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def backend_name(self) -> str:
        return "memory" if isinstance(self.backend, InMemoryCache) else "redis"

    async def _read_fresh(self, key: str, ttl: float) -> Optional[AggregatedResponse]:
        """Return the cached response for key if younger than ttl."""
        value = await self.backend.get(key)
        if not value:
            return None

        try:
            entry = json.loads(value)
            if self._clock() - entry["stored_at"] >= ttl:
                return None
            return AggregatedResponse.model_validate(entry["data"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    async def _write(self, key: str, data: AggregatedResponse) -> None:
        entry = {
            "stored_at": self._clock(),
            "data": data.model_dump(mode="json", by_alias=True),
        }
        await self.backend.set(key, json.dumps(entry))

    async def _refresh(
        self,
        key: str,
        compute: Callable[[], Awaitable[AggregatedResponse]]
    ) -> AggregatedResponse:
        try:
            data = await compute()
            await self._write(key, data)
            return data
        finally:
            self._inflight.pop(key, None)

    @staticmethod
    def _log_refresh_failure(task: asyncio.Task) -> None:
        # Reads the exception even when every waiter was cancelled
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Cache refresh failed: {error}")

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[AggregatedResponse]],
        ttl: Optional[float] = None
    ) -> AggregatedResponse:
        """
        Return the cached response for key, or compute and store a new one.

        Args:
            key: Cache key
            compute: Coroutine factory producing a fresh response
            ttl: Maximum entry age in seconds, defaults to the cache TTL

        Returns:
            Cached or freshly computed AggregatedResponse
        """
        ttl = self.ttl if ttl is None else ttl

        cached = await self._read_fresh(key, ttl)
        if cached is not None:
            logger.info(f"Returning cached results for {key}")
            return cached

        async with self._lock:
            task = self._inflight.get(key)
            if task is None:
                # Another caller may have refreshed while we waited on the lock
                cached = await self._read_fresh(key, ttl)
                if cached is not None:
                    return cached

                logger.info(f"Cache miss for {key}, aggregating fresh reviews")
                task = asyncio.ensure_future(self._refresh(key, compute))
                task.add_done_callback(self._log_refresh_failure)
                self._inflight[key] = task

        # Shielded so a cancelled caller does not cancel the shared refresh
        return await asyncio.shield(task)

    async def close(self) -> None:
        await self.backend.aclose()
