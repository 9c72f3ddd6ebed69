from __future__ import annotations

import fnmatch
import logging
import time
from collections.abc import Iterable

from cachetools import TLRUCache

logger = logging.getLogger(__name__)


def _expires_at(key, value, now):
    _, ttl = value
    return now + ttl


class MemoryCache:
    """Process-local cache adapter with per-entry TTL.

    Only consistent within one worker process; use RedisCache when several
    workers share the store. Pattern enumeration walks the bounded entry
    table, so ``index`` arguments are accepted and ignored.
    """

    def __init__(self, maxsize: int = 2048, timer=time.monotonic):
        self._entries = TLRUCache(maxsize=maxsize, ttu=_expires_at, timer=timer)
        self.stats = {"hits": 0, "misses": 0, "deleted": 0}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            self.stats["misses"] += 1
            logger.debug("Cache miss: %s", key)
            return None
        self.stats["hits"] += 1
        logger.debug("Cache hit: %s", key)
        return entry[0]

    async def set(
        self, key: str, value: str, ttl: int, index: str | None = None
    ) -> None:
        if ttl < 1:
            raise ValueError("ttl must be >= 1 second")
        self._entries[key] = (value, ttl)

    async def keys_matching(self, pattern: str) -> set[str]:
        self._entries.expire()
        return {k for k in list(self._entries.keys()) if fnmatch.fnmatchcase(k, pattern)}

    async def delete_many(self, keys: Iterable[str], index: str | None = None) -> int:
        deleted = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                deleted += 1
        self.stats["deleted"] += deleted
        return deleted

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self._entries.clear()

    def get_stats(self) -> dict:
        total = self.stats["hits"] + self.stats["misses"]
        return {
            **self.stats,
            "size": len(self),
            "hit_rate": self.stats["hits"] / total if total > 0 else 0,
        }

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
