from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from blog_service.database import get_db
from blog_service.models import User
from blog_service.schemas import CommentCreate, CommentUpdate
from blog_service.security import get_current_user
from blog_service.services import comment_service

router = APIRouter(tags=["comments"])

@router.get("/posts/{post_id}/comments")
async def list_comments(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"comments": await comment_service.list_comments(db, post_id)}

@router.get("/comments/{comment_id}")
async def get_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"comment": await comment_service.get_comment(db, comment_id)}

@router.post("/posts/{post_id}/comments", status_code=201)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.add_comment(db, post_id, current_user.id, data.content)
    return {"message": "Comment added successfully", "comment": comment}

@router.put("/comments/{comment_id}")
async def edit_comment(
    comment_id: int,
    data: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.edit_comment(db, comment_id, current_user.id, data.content)
    return {"message": "Comment edited successfully", "comment": comment}

@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, comment_id, current_user.id)
    return {"message": "Comment deleted successfully"}
