from fastapi import Depends, Request
from typing_extensions import Annotated

from app.services.todo_service import TodoService
from app.services.user_service import UserService


# Services are built once in the lifespan and kept on app.state
def get_todo_service(request: Request) -> TodoService:
    return request.app.state.todo_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


TodoServiceDep = Annotated[TodoService, Depends(get_todo_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
