import math

from fastapi import APIRouter, Path, Query, Request, status
from typing_extensions import Annotated

from app.dependencies import TodoServiceDep
from app.models import PageMeta, TodoCreate, TodoListResponse, TodoRead, TodoUpdate

router = APIRouter(prefix="/users/{user_id}/todos", tags=["todos"])

# separator and glob characters would break owner-partitioned cache keys
OwnerId = Annotated[str, Path(pattern=r"^[^:*?\[\]\\]+$")]


@router.post("/", response_model=TodoRead, status_code=status.HTTP_201_CREATED)
async def create_todo(user_id: OwnerId, todo_data: TodoCreate, service: TodoServiceDep):
    """Create a new todo"""
    return await service.create_todo(user_id, todo_data)


@router.get("/", response_model=TodoListResponse)
async def list_todos(
    request: Request,
    user_id: OwnerId,
    service: TodoServiceDep,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
):
    settings = request.app.state.settings
    limit = min(limit or settings.default_page_size, settings.max_page_size)

    result = await service.list_todos(user_id, page, limit)
    return TodoListResponse(
        data=result.items,
        meta=PageMeta(
            page=page,
            limit=limit,
            total_items=result.total_items,
            total_pages=math.ceil(result.total_items / limit),
        ),
    )


@router.get("/{todo_id}", response_model=TodoRead)
async def get_todo(user_id: OwnerId, todo_id: str, service: TodoServiceDep):
    """Get a specific todo by ID"""
    return await service.get_todo(user_id, todo_id)


@router.patch("/{todo_id}", response_model=TodoRead)
async def update_todo(
    user_id: OwnerId, todo_id: str, todo_data: TodoUpdate, service: TodoServiceDep
):
    return await service.update_todo(user_id, todo_id, todo_data)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(user_id: OwnerId, todo_id: str, service: TodoServiceDep):
    """Delete a todo"""
    await service.delete_todo(user_id, todo_id)
