"""Store adapter contracts consumed by the services."""

from collections.abc import Sequence
from typing import Protocol

from app.models import Todo, TodoCreate, TodoUpdate, User, UserCreate


class TodoStore(Protocol):
    async def create(self, owner_id: str, data: TodoCreate) -> Todo: ...

    async def get(self, owner_id: str, todo_id: str) -> Todo: ...

    async def update(self, owner_id: str, todo_id: str, patch: TodoUpdate) -> Todo: ...

    async def delete(self, owner_id: str, todo_id: str) -> Todo: ...

    async def count_and_fetch_page(
        self, owner_id: str, offset: int, limit: int
    ) -> tuple[Sequence[Todo], int]:
        """Count the owner's todos and fetch one ordered slice in one snapshot."""
        ...

    async def ping(self) -> None: ...


class UserStore(Protocol):
    async def create(self, data: UserCreate) -> User: ...

    async def get(self, user_id: str) -> User: ...
