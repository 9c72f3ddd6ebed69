from __future__ import annotations

import asyncio
import fnmatch
import logging
from collections.abc import Iterable
from typing import Any, Awaitable

from redis.asyncio import Redis, RedisError

from app.core.config import Settings
from app.core.exceptions import CacheUnavailable

logger = logging.getLogger(__name__)

DELETE_CHUNK_SIZE = 500


class RedisCache:
    """
    Shared cache adapter on Redis.

    Features:
    - Automatic key namespacing (transparent to callers)
    - Per-operation timeout; timeouts surface as CacheUnavailable
    - Pattern enumeration from per-pattern index sets, batched UNLINK deletes
    """

    def __init__(self, redis: Redis, namespace: str = "", timeout: float = 0.5):
        self._redis = redis
        self._namespace = namespace
        self._timeout = timeout

        # Stats tracking
        self.stats = {
            "hits": 0,
            "misses": 0,
            "errors": 0,
            "deleted": 0,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCache":
        redis = Redis.from_url(
            settings.redis_dsn,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.redis_pool_size,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )
        return cls(
            redis,
            namespace=settings.cache_namespace,
            timeout=settings.cache_timeout_seconds,
        )

    def _key(self, key: str) -> str:
        """Build namespaced cache key."""
        return f"{self._namespace}{key}"

    def _index_key(self, pattern: str) -> str:
        return f"{self._namespace}index:{pattern}"

    async def _call(self, op: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            self.stats["errors"] += 1
            raise CacheUnavailable(f"Redis {op} timed out") from e
        except RedisError as e:
            self.stats["errors"] += 1
            raise CacheUnavailable(f"Redis {op} error: {e}") from e

    async def get(self, key: str) -> str | None:
        raw = await self._call("GET", self._redis.get(self._key(key)))
        if raw is None:
            self.stats["misses"] += 1
            logger.debug("Cache miss: %s", key)
        else:
            self.stats["hits"] += 1
            logger.debug("Cache hit: %s", key)
        return raw

    async def set(
        self, key: str, value: str, ttl: int, index: str | None = None
    ) -> None:
        """Store value; with ``index``, also record key in that pattern's index set.

        The index is written first and outlives its members, so a stored
        key is always reachable by keys_matching(index).
        """

        async def store() -> None:
            if index is not None:
                index_key = self._index_key(index)
                await self._redis.sadd(index_key, key)
                await self._redis.expire(index_key, ttl)
            await self._redis.set(self._key(key), value, ex=ttl)

        await self._call("SET", store())
        logger.debug("Stored %s (ttl=%ss)", key, ttl)

    async def keys_matching(self, pattern: str) -> set[str]:
        """Keys stored with ``index=pattern``. O(indexed keys), never a keyspace scan."""
        members = await self._call(
            "SMEMBERS", self._redis.smembers(self._index_key(pattern))
        )
        return {k for k in members if fnmatch.fnmatchcase(k, pattern)}

    async def delete_many(self, keys: Iterable[str], index: str | None = None) -> int:
        """Delete keys in UNLINK batches (non-blocking on the server)."""
        keys = list(keys)
        if not keys:
            return 0

        async def unlink() -> int:
            deleted = 0
            for start in range(0, len(keys), DELETE_CHUNK_SIZE):
                chunk = keys[start : start + DELETE_CHUNK_SIZE]
                deleted += int(await self._redis.unlink(*map(self._key, chunk)) or 0)
                if index is not None:
                    await self._redis.srem(self._index_key(index), *chunk)
            return deleted

        deleted = await self._call("UNLINK", unlink())
        self.stats["deleted"] += deleted
        return deleted

    async def ping(self) -> None:
        await self._call("PING", self._redis.ping())

    async def close(self):
        """Graceful shutdown of cache connections."""
        try:
            await self._redis.aclose()
            logger.info("Redis connection closed")
        except RedisError as e:
            logger.error("Error closing Redis: %s", e)

    def get_stats(self) -> dict:
        total = self.stats["hits"] + self.stats["misses"]
        return {
            **self.stats,
            "hit_rate": self.stats["hits"] / total if total > 0 else 0,
        }
