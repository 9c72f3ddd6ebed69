from collections.abc import Sequence

from sqlalchemy import func, text
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import RecordNotFound
from app.models import Todo, TodoCreate, TodoUpdate, User, get_utc_now
from app.stores.errors import store_errors


class SqlTodoStore:
    """Todo persistence on SQLModel/SQLAlchemy asyncio.

    ``isolation_level`` applies to the count+fetch transaction only; use
    "REPEATABLE READ" on PostgreSQL so both statements share one snapshot.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        isolation_level: str | None = None,
    ):
        self._session_factory = session_factory
        self._isolation_level = isolation_level

    @staticmethod
    async def _get_owned(session: AsyncSession, owner_id: str, todo_id: str) -> Todo:
        result = await session.exec(
            select(Todo).where(Todo.id == todo_id, Todo.owner_id == owner_id)
        )
        todo = result.first()
        if todo is None:
            raise RecordNotFound("Todo", todo_id)
        return todo

    async def create(self, owner_id: str, data: TodoCreate) -> Todo:
        with store_errors("create todo"):
            async with self._session_factory() as session:
                if await session.get(User, owner_id) is None:
                    raise RecordNotFound("User", owner_id)
                todo = Todo.model_validate(data, update={"owner_id": owner_id})
                session.add(todo)
                await session.commit()
                await session.refresh(todo)
                return todo

    async def get(self, owner_id: str, todo_id: str) -> Todo:
        with store_errors("get todo"):
            async with self._session_factory() as session:
                return await self._get_owned(session, owner_id, todo_id)

    async def update(self, owner_id: str, todo_id: str, patch: TodoUpdate) -> Todo:
        with store_errors("update todo"):
            async with self._session_factory() as session:
                todo = await self._get_owned(session, owner_id, todo_id)
                todo.sqlmodel_update(patch.model_dump(exclude_unset=True, exclude_none=True))
                todo.updated_at = get_utc_now()
                await session.commit()
                await session.refresh(todo)
                return todo

    async def delete(self, owner_id: str, todo_id: str) -> Todo:
        with store_errors("delete todo"):
            async with self._session_factory() as session:
                todo = await self._get_owned(session, owner_id, todo_id)
                await session.delete(todo)
                await session.commit()
                return todo

    async def count_and_fetch_page(
        self, owner_id: str, offset: int, limit: int
    ) -> tuple[Sequence[Todo], int]:
        with store_errors("list todos"):
            async with self._session_factory() as session:
                # first statement of the transaction pins the isolation level
                if self._isolation_level:
                    await session.connection(
                        execution_options={"isolation_level": self._isolation_level}
                    )
                total = (
                    await session.exec(
                        select(func.count(Todo.id)).where(Todo.owner_id == owner_id)
                    )
                ).one()
                items = (
                    await session.exec(
                        select(Todo)
                        .where(Todo.owner_id == owner_id)
                        .order_by(Todo.created_at, Todo.id)
                        .offset(offset)
                        .limit(limit)
                    )
                ).all()
                await session.commit()
                return items, total

    async def ping(self) -> None:
        with store_errors("ping"):
            async with self._session_factory() as session:
                conn = await session.connection()
                await conn.execute(text("SELECT 1"))
