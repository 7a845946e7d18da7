from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from blog_service.database import get_db, get_session_factory
from blog_service.dependencies import PaginationParams
from blog_service.models import User
from blog_service.schemas import LikeSummary, PostCreate, PostDetail, PostList, PostUpdate
from blog_service.security import get_current_user
from blog_service.services import like_service, post_service

router = APIRouter(prefix="/posts", tags=["posts"])

@router.get("", response_model=PostList)
async def list_posts(
    pagination: PaginationParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.list_posts(db, pagination.page, pagination.page_size)

@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_post(db, post_id)

@router.post("", status_code=201)
async def create_post(
    data: PostCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.create_post(db, current_user.id, data)
    return {"message": "Post created successfully", "post": post}

@router.patch("/{post_id}")
async def update_post(
    post_id: int,
    data: PostUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.update_post(db, post_id, current_user.id, data)
    return {"message": "Post updated successfully", "updatedPost": post}

@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    await post_service.delete_post(db, post_id, current_user.id)
    # The sweep runs in its own session; it must see the delete.
    await db.commit()
    background_tasks.add_task(post_service.sweep_unused_names, session_factory)
    return {"message": "Post deleted successfully"}

@router.post("/{post_id}/likes", response_model=LikeSummary)
async def like_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await like_service.like_post(db, post_id, current_user.id)

@router.delete("/{post_id}/likes", response_model=LikeSummary)
async def unlike_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await like_service.unlike_post(db, post_id, current_user.id)
