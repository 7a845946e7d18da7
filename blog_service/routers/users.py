from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from blog_service.database import get_db
from blog_service.models import User
from blog_service.schemas import UserCreate, UserResponse
from blog_service.security import get_current_user
from blog_service.services import user_service

router = APIRouter(prefix="/users", tags=["users"])

@router.post("", status_code=201, response_model=UserResponse)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    return await user_service.create_user(db, data)

@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)
