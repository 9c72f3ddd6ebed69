import logging
from functools import wraps
from typing import Any, Callable

from app.cache.keys import list_key_pattern
from app.core.exceptions import CacheUnavailable

logger = logging.getLogger(__name__)


async def invalidate_owner_listings(cache, owner_id: str) -> int:
    """
    Drop every cached listing page of one owner.

    Two steps: enumerate keys matching the owner's pattern, then delete
    them in one batch. Cost is O(cached pages of that owner).
    Raises CacheUnavailable; callers decide whether that is fatal.
    """
    pattern = list_key_pattern(owner_id)
    keys = await cache.keys_matching(pattern)
    if not keys:
        return 0
    deleted = await cache.delete_many(keys, index=pattern)
    logger.info("Invalidated %s cached listing page(s) for owner %s", deleted, owner_id)
    return deleted


def invalidates_listings(owner_of: Callable[[Any], str]):
    """
    Decorator for async mutation methods on a service holding ``self.cache``.

    The wrapped mutation runs first; only when it returns do we invalidate
    the listings of ``owner_of(result)``. If it raises, nothing is
    invalidated. Cache failures are logged and swallowed; the mutation
    result is returned unchanged.
    Example:
      @invalidates_listings(owner_of=lambda todo: todo.owner_id)
      async def delete_todo(self, owner_id, todo_id): ...
    """

    def decorator(fn: Callable):
        @wraps(fn)
        async def wrapper(self, *args, **kwargs):
            result = await fn(self, *args, **kwargs)
            owner_id = owner_of(result)
            try:
                await invalidate_owner_listings(self.cache, owner_id)
            except CacheUnavailable as e:
                # stale pages remain until list_cache_ttl_seconds expires
                logger.warning(
                    "Listing invalidation failed for owner %s: %s", owner_id, e.message
                )
            return result

        return wrapper

    return decorator
