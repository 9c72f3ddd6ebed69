from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import RecordNotFound
from app.models import User, UserCreate
from app.stores.errors import store_errors


class SqlUserStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, data: UserCreate) -> User:
        with store_errors("create user", unique=("User", "email")):
            async with self._session_factory() as session:
                user = User.model_validate(data)
                session.add(user)
                await session.commit()
                await session.refresh(user)
                return user

    async def get(self, user_id: str) -> User:
        with store_errors("get user"):
            async with self._session_factory() as session:
                user = await session.get(User, user_id)
                if user is None:
                    raise RecordNotFound("User", user_id)
                return user
