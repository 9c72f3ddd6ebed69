"""Cache adapter contract used by the services."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class CacheAdapter(Protocol):
    """Key-value cache with expiry and glob-pattern enumeration.

    Values are opaque strings. Every failure (connection, timeout,
    protocol) is raised as CacheUnavailable; callers decide how to degrade.
    """

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent or expired."""
        ...

    async def set(
        self, key: str, value: str, ttl: int, index: str | None = None
    ) -> None:
        """Store value under key, expiring after ttl seconds.

        ``index`` names the glob pattern the key will later be enumerated by;
        backends that cannot scan cheaply keep an index per pattern.
        """
        ...

    async def keys_matching(self, pattern: str) -> set[str]:
        """Return the keys matching a glob pattern.

        Pattern must be one the keys were stored under as ``index``. The
        result may include keys that have since expired.
        """
        ...

    async def delete_many(self, keys: Iterable[str], index: str | None = None) -> int:
        """Delete keys (and drop them from ``index``); return how many existed."""
        ...

    async def ping(self) -> None:
        """Raise CacheUnavailable if the backend does not answer."""
        ...

    async def close(self) -> None:
        ...

    def get_stats(self) -> dict:
        """Hit/miss/error counters since startup."""
        ...
