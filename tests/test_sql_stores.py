"""SqlTodoStore / SqlUserStore against a temporary SQLite database."""

import pytest

from app.core.config import Settings
from app.core.exceptions import DuplicateRecord, RecordNotFound, StoreFailure
from app.database import build_engine, build_session_factory, create_db_and_tables
from app.models import TodoCreate, TodoUpdate, UserCreate
from app.stores.todo_store import SqlTodoStore
from app.stores.user_store import SqlUserStore


@pytest.fixture
async def session_factory(tmp_path):
    engine = build_engine(Settings(database_url=f"sqlite+aiosqlite:///{tmp_path}/store.db"))
    await create_db_and_tables(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def users(session_factory) -> SqlUserStore:
    return SqlUserStore(session_factory)


@pytest.fixture
def todos(session_factory) -> SqlTodoStore:
    return SqlTodoStore(session_factory)


@pytest.fixture
async def owner_id(users: SqlUserStore) -> str:
    user = await users.create(UserCreate(email="owner@example.com"))
    return user.id


async def test_user_create_and_get(users: SqlUserStore) -> None:
    created = await users.create(UserCreate(email="a@example.com"))

    fetched = await users.get(created.id)

    assert fetched.email == "a@example.com"
    assert len(created.id) == 36


async def test_duplicate_email_is_rejected(users: SqlUserStore) -> None:
    await users.create(UserCreate(email="dup@example.com"))

    with pytest.raises(DuplicateRecord):
        await users.create(UserCreate(email="dup@example.com"))


async def test_get_unknown_user_is_not_found(users: SqlUserStore) -> None:
    with pytest.raises(RecordNotFound):
        await users.get("nope")


async def test_create_todo_for_unknown_owner_is_not_found(todos: SqlTodoStore) -> None:
    with pytest.raises(RecordNotFound):
        await todos.create("ghost", TodoCreate(title="x"))


async def test_count_and_fetch_page_returns_slice_and_total(todos: SqlTodoStore, owner_id: str, users: SqlUserStore) -> None:
    other = await users.create(UserCreate(email="other@example.com"))
    for i in range(7):
        await todos.create(owner_id, TodoCreate(title=f"t{i}"))
    await todos.create(other.id, TodoCreate(title="not mine"))

    everything, total = await todos.count_and_fetch_page(owner_id, 0, 100)
    page1, total1 = await todos.count_and_fetch_page(owner_id, 0, 5)
    page2, total2 = await todos.count_and_fetch_page(owner_id, 5, 5)

    assert total == total1 == total2 == 7
    assert len(page1) == 5
    assert len(page2) == 2
    assert [t.id for t in page1 + page2] == [t.id for t in everything]
    assert all(t.owner_id == owner_id for t in everything)


async def test_count_and_fetch_page_past_the_end(todos: SqlTodoStore, owner_id: str) -> None:
    await todos.create(owner_id, TodoCreate(title="only"))

    items, total = await todos.count_and_fetch_page(owner_id, 10, 5)

    assert list(items) == []
    assert total == 1


async def test_update_applies_only_set_fields(todos: SqlTodoStore, owner_id: str) -> None:
    todo = await todos.create(owner_id, TodoCreate(title="before"))

    updated = await todos.update(owner_id, todo.id, TodoUpdate(completed=True))

    assert updated.id == todo.id
    assert updated.title == "before"
    assert updated.completed is True
    assert updated.updated_at is not None


async def test_update_and_delete_are_owner_scoped(todos: SqlTodoStore, owner_id: str) -> None:
    todo = await todos.create(owner_id, TodoCreate(title="mine"))

    with pytest.raises(RecordNotFound):
        await todos.update("someone-else", todo.id, TodoUpdate(title="x"))
    with pytest.raises(RecordNotFound):
        await todos.delete("someone-else", todo.id)
    assert (await todos.get(owner_id, todo.id)).title == "mine"


async def test_delete_returns_removed_record(todos: SqlTodoStore, owner_id: str) -> None:
    todo = await todos.create(owner_id, TodoCreate(title="bye"))

    deleted = await todos.delete(owner_id, todo.id)

    assert deleted.id == todo.id
    assert deleted.owner_id == owner_id
    with pytest.raises(RecordNotFound):
        await todos.get(owner_id, todo.id)


async def test_ping(todos: SqlTodoStore) -> None:
    await todos.ping()


async def test_missing_tables_surface_as_store_failure(tmp_path) -> None:
    engine = build_engine(Settings(database_url=f"sqlite+aiosqlite:///{tmp_path}/empty.db"))
    store = SqlTodoStore(build_session_factory(engine))

    with pytest.raises(StoreFailure):
        await store.count_and_fetch_page("u1", 0, 5)
    await engine.dispose()
