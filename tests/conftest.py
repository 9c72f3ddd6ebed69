"""Shared fixtures: an in-memory todo store that counts transactions and a
memory cache whose operations can be made to fail on demand.
"""

import asyncio
import itertools
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from app.cache.memory import MemoryCache
from app.core.exceptions import CacheUnavailable, RecordNotFound
from app.models import Todo, TodoCreate, TodoUpdate
from app.services.todo_service import TodoService


class FakeTodoStore:
    """Dict-backed TodoStore. ``calls`` counts every store operation."""

    def __init__(self) -> None:
        self.todos: dict[str, Todo] = {}
        self.calls: Counter = Counter()
        self.delay = 0.0
        self.fail_with: Exception | None = None
        self.in_flight = 0
        self.max_in_flight = 0
        self._clock = itertools.count()

    def _stamp(self) -> datetime:
        return datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(
            seconds=next(self._clock)
        )

    async def _enter(self, op: str) -> None:
        self.calls[op] += 1
        if self.delay:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.delay)
            finally:
                self.in_flight -= 1
        if self.fail_with is not None:
            raise self.fail_with

    def _owned(self, owner_id: str, todo_id: str) -> Todo:
        todo = self.todos.get(todo_id)
        if todo is None or todo.owner_id != owner_id:
            raise RecordNotFound("Todo", todo_id)
        return todo

    async def seed(self, owner_id: str, count: int) -> list[Todo]:
        created = [
            await self.create(owner_id, TodoCreate(title=f"todo {i}"))
            for i in range(count)
        ]
        self.calls.clear()
        return created

    async def create(self, owner_id: str, data: TodoCreate) -> Todo:
        await self._enter("create")
        todo = Todo(
            title=data.title,
            completed=data.completed,
            owner_id=owner_id,
            created_at=self._stamp(),
        )
        self.todos[todo.id] = todo
        return todo

    async def get(self, owner_id: str, todo_id: str) -> Todo:
        await self._enter("get")
        return self._owned(owner_id, todo_id)

    async def update(self, owner_id: str, todo_id: str, patch: TodoUpdate) -> Todo:
        await self._enter("update")
        todo = self._owned(owner_id, todo_id)
        for field, value in patch.model_dump(exclude_unset=True).items():
            setattr(todo, field, value)
        todo.updated_at = self._stamp()
        return todo

    async def delete(self, owner_id: str, todo_id: str) -> Todo:
        await self._enter("delete")
        return self.todos.pop(self._owned(owner_id, todo_id).id)

    async def count_and_fetch_page(self, owner_id: str, offset: int, limit: int):
        await self._enter("count_and_fetch_page")
        owned = sorted(
            (t for t in self.todos.values() if t.owner_id == owner_id),
            key=lambda t: (t.created_at, t.id),
        )
        return owned[offset : offset + limit], len(owned)

    async def ping(self) -> None:
        await self._enter("ping")


class FlakyCache(MemoryCache):
    """MemoryCache with per-operation failure switches."""

    def __init__(self) -> None:
        super().__init__(maxsize=1024)
        self.failing: set[str] = set()
        self.ops: Counter = Counter()

    def _check(self, op: str) -> None:
        self.ops[op] += 1
        if op in self.failing:
            raise CacheUnavailable(f"simulated {op} failure")

    async def get(self, key):
        self._check("get")
        return await super().get(key)

    async def set(self, key, value, ttl, index=None):
        self._check("set")
        await super().set(key, value, ttl, index)

    async def keys_matching(self, pattern):
        self._check("keys_matching")
        return await super().keys_matching(pattern)

    async def delete_many(self, keys, index=None):
        self._check("delete_many")
        return await super().delete_many(keys, index)

    async def ping(self):
        self._check("ping")


@pytest.fixture
def store() -> FakeTodoStore:
    return FakeTodoStore()


@pytest.fixture
def cache() -> FlakyCache:
    return FlakyCache()


@pytest.fixture
def service(store: FakeTodoStore, cache: FlakyCache) -> TodoService:
    return TodoService(store, cache, list_ttl=300, store_timeout=1.0)
