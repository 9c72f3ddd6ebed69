from app.models import UserCreate, UserRead
from app.stores.errors import with_store_deadline
from app.stores.protocol import UserStore


class UserService:
    """Owner accounts. Not cached."""

    def __init__(self, store: UserStore, store_timeout: float | None = 5.0):
        self.store = store
        self.store_timeout = store_timeout

    async def create_user(self, data: UserCreate) -> UserRead:
        user = await with_store_deadline(self.store.create(data), self.store_timeout)
        return UserRead.model_validate(user)

    async def get_user(self, user_id: str) -> UserRead:
        user = await with_store_deadline(self.store.get(user_id), self.store_timeout)
        return UserRead.model_validate(user)
