from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime
from sqlmodel import Column, Field, SQLModel


def get_utc_now():
    """Helper function to get current UTC time with timezone"""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class UserBase(SQLModel):
    email: str = Field(min_length=3, max_length=320)


class User(UserBase, table=True):
    """Database model"""

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    email: str = Field(min_length=3, max_length=320, unique=True, index=True)
    created_at: datetime = Field(
        default_factory=get_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class UserCreate(UserBase):
    pass


class UserRead(UserBase):
    id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TodoBase(SQLModel):
    """Base model with shared fields"""

    title: str = Field(min_length=1, max_length=200)
    completed: bool = Field(default=False)


class Todo(TodoBase, table=True):
    """Database model"""

    __tablename__ = "todos"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    owner_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    created_at: datetime = Field(
        default_factory=get_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    updated_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )


class TodoCreate(TodoBase):
    """Schema for creating a todo"""

    pass


class TodoUpdate(SQLModel):
    """Schema for updating a todo - all fields optional"""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    completed: bool | None = None


class TodoRead(TodoBase):
    """Schema for todo responses and cached list items"""

    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class TodoPage(SQLModel):
    """One page of an owner's todos plus the owner's total todo count.

    This is the cached payload; it is only ever decoded through
    ``model_validate_json`` so a malformed entry fails validation.
    """

    items: list[TodoRead]
    total_items: int = Field(ge=0)


class PageMeta(SQLModel):
    page: int
    limit: int
    total_items: int
    total_pages: int


class TodoListResponse(SQLModel):
    data: list[TodoRead]
    meta: PageMeta
