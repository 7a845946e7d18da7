"""
Like service: one like per user per post, exposed to readers as a count.
"""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.database import insert_or_ignore
from blog_service.exceptions import NotFoundError
from blog_service.models import Like, Post

logger = logging.getLogger(__name__)


async def _ensure_post(db: AsyncSession, post_id: int) -> None:
    result = await db.execute(select(Post.id).where(Post.id == post_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError(f"Post {post_id} does not exist", message="Post not found")


async def count_likes(db: AsyncSession, post_id: int) -> int:
    q = select(func.count()).select_from(Like).where(Like.post_id == post_id)
    return (await db.execute(q)).scalar_one()


async def _summary(db: AsyncSession, post_id: int) -> dict:
    return {"postId": post_id, "likeCount": await count_likes(db, post_id)}


async def like_post(db: AsyncSession, post_id: int, user_id: int) -> dict:
    """
    Record a like by *user_id*; liking twice, even concurrently, leaves a
    single like.
    """
    await _ensure_post(db, post_id)

    values = {"post_id": post_id, "user_id": user_id}
    if await insert_or_ignore(db, Like, values, ["post_id", "user_id"]):
        logger.info("User %s liked post %s", user_id, post_id)

    return await _summary(db, post_id)


async def unlike_post(db: AsyncSession, post_id: int, user_id: int) -> dict:
    await _ensure_post(db, post_id)
    await db.execute(
        delete(Like).where(Like.post_id == post_id, Like.user_id == user_id)
    )
    return await _summary(db, post_id)
