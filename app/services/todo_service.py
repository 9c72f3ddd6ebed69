import asyncio
import logging

from cachetools import TTLCache
from pydantic import ValidationError

from app.cache.decorators import invalidates_listings
from app.cache.keys import list_key, list_key_pattern
from app.cache.protocol import CacheAdapter
from app.core.exceptions import CacheUnavailable
from app.models import TodoCreate, TodoPage, TodoRead, TodoUpdate
from app.stores.errors import with_store_deadline
from app.stores.protocol import TodoStore

logger = logging.getLogger(__name__)


class TodoService:
    """
    Todo operations with a read-through cache on the paginated listing.

    Reads: cache -> (miss) one count+fetch store transaction -> populate.
    Writes: store first, then drop every cached page of the owner.

    The cache is an optimization only: any CacheUnavailable is logged and
    handled as a miss (reads) or accepted staleness (writes), bounded by
    ``list_ttl``. Store errors always propagate.
    """

    def __init__(
        self,
        store: TodoStore,
        cache: CacheAdapter,
        list_ttl: int = 300,
        store_timeout: float | None = 5.0,
        single_flight: bool = True,
    ):
        if list_ttl < 1:
            raise ValueError("list_ttl must be >= 1 second")
        self.store = store
        self.cache = cache
        self.list_ttl = list_ttl
        self.store_timeout = store_timeout
        self.single_flight = single_flight
        # Per-key locks for stampede protection within this process.
        # setdefault() is atomic on the event loop, so concurrent callers for
        # the same key share one lock. Entries expire 300s after insertion.
        self._locks = TTLCache(maxsize=10_000, ttl=300)

    async def list_todos(self, owner_id: str, page: int, limit: int) -> TodoPage:
        key = list_key(owner_id, page, limit)

        cached, reachable = await self._read_cached(key)
        if cached is not None:
            return cached

        if not (self.single_flight and reachable):
            # with the cache down a lock would only queue callers behind
            # each other's cache timeouts
            return await self._load_and_populate(key, owner_id, page, limit)

        async with self._locks.setdefault(key, asyncio.Lock()):
            # another request may have populated the key while we waited
            cached, _ = await self._read_cached(key)
            if cached is not None:
                return cached
            return await self._load_and_populate(key, owner_id, page, limit)

    async def _read_cached(self, key: str) -> tuple[TodoPage | None, bool]:
        """Return (page or None, whether the cache answered)."""
        try:
            raw = await self.cache.get(key)
        except CacheUnavailable as e:
            logger.warning("Cache read failed for %s, using store: %s", key, e.message)
            return None, False
        if raw is None:
            return None, True
        try:
            return TodoPage.model_validate_json(raw), True
        except ValidationError:
            logger.warning("Malformed cache entry %s treated as miss", key)
            return None, True

    async def _load_and_populate(
        self, key: str, owner_id: str, page: int, limit: int
    ) -> TodoPage:
        offset = (page - 1) * limit
        items, total = await with_store_deadline(
            self.store.count_and_fetch_page(owner_id, offset, limit),
            self.store_timeout,
        )
        result = TodoPage(
            items=[TodoRead.model_validate(todo) for todo in items], total_items=total
        )
        try:
            await self.cache.set(
                key,
                result.model_dump_json(),
                self.list_ttl,
                index=list_key_pattern(owner_id),
            )
        except CacheUnavailable as e:
            logger.warning("Cache populate failed for %s: %s", key, e.message)
        return result

    async def get_todo(self, owner_id: str, todo_id: str) -> TodoRead:
        todo = await with_store_deadline(
            self.store.get(owner_id, todo_id), self.store_timeout
        )
        return TodoRead.model_validate(todo)

    @invalidates_listings(owner_of=lambda todo: todo.owner_id)
    async def create_todo(self, owner_id: str, data: TodoCreate) -> TodoRead:
        todo = await with_store_deadline(
            self.store.create(owner_id, data), self.store_timeout
        )
        return TodoRead.model_validate(todo)

    @invalidates_listings(owner_of=lambda todo: todo.owner_id)
    async def update_todo(
        self, owner_id: str, todo_id: str, patch: TodoUpdate
    ) -> TodoRead:
        todo = await with_store_deadline(
            self.store.update(owner_id, todo_id, patch), self.store_timeout
        )
        return TodoRead.model_validate(todo)

    @invalidates_listings(owner_of=lambda todo: todo.owner_id)
    async def delete_todo(self, owner_id: str, todo_id: str) -> TodoRead:
        todo = await with_store_deadline(
            self.store.delete(owner_id, todo_id), self.store_timeout
        )
        return TodoRead.model_validate(todo)
