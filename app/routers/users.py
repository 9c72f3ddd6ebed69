from fastapi import APIRouter, status

from app.dependencies import UserServiceDep
from app.models import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreate, service: UserServiceDep):
    """Register a todo owner"""
    return await service.create_user(user_data)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: str, service: UserServiceDep):
    return await service.get_user(user_id)
