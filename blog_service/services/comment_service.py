"""
Comment service: comments scoped to a post.

Only the comment's author may edit or delete it, and only ``content`` is
mutable.  A post's comment sequence is derived from ``Comment.post_id``,
so creating or deleting a comment updates the parent post in the same
transaction without a separate write to the post row.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_service.exceptions import ForbiddenError, NotFoundError
from blog_service.models import Comment, Post
from blog_service.services.user_service import author_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def comment_to_dict(comment: Comment, with_author: bool = True) -> dict:
    data = {
        "id": comment.id,
        "content": comment.content,
        "post_id": comment.post_id,
        "author_id": comment.author_id,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "updated_at": comment.updated_at.isoformat() if comment.updated_at else None,
    }
    if with_author:
        data["author"] = author_to_dict(comment.author)
    return data


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

async def _post_exists(db: AsyncSession, post_id: int) -> bool:
    result = await db.execute(select(Post.id).where(Post.id == post_id))
    return result.scalar_one_or_none() is not None


async def _load_comment(db: AsyncSession, comment_id: int) -> Comment:
    """
    Fetch a comment with its author, re-reading the row so values written
    by the database (timestamps) are current.
    """
    q = (
        select(Comment)
        .where(Comment.id == comment_id)
        .options(joinedload(Comment.author))
        .execution_options(populate_existing=True)
    )
    comment = (await db.execute(q)).unique().scalar_one_or_none()
    if comment is None:
        raise NotFoundError(f"Comment {comment_id} does not exist", message="Comment not found")
    return comment


async def _load_owned_comment(db: AsyncSession, comment_id: int, author_id: int) -> Comment:
    comment = await _load_comment(db, comment_id)
    if comment.author_id != author_id:
        raise ForbiddenError(
            f"User {author_id} is not the author of comment {comment_id}"
        )
    return comment


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def add_comment(db: AsyncSession, post_id: int, author_id: int, content: str) -> dict:
    """Attach a new comment by *author_id* to the post identified by *post_id*."""
    logger.info("Adding comment to post %s for user %s", post_id, author_id)
    if not await _post_exists(db, post_id):
        raise NotFoundError(f"Post {post_id} does not exist", message="Post not found")

    comment = Comment(content=content, post_id=post_id, author_id=author_id)
    db.add(comment)
    await db.flush()
    logger.info("Comment %s added to post %s", comment.id, post_id)

    return comment_to_dict(await _load_comment(db, comment.id))


async def list_comments(db: AsyncSession, post_id: int) -> list[dict]:
    """
    Return every comment on *post_id* (oldest first) with its author.

    A post without comments yields an empty list; only a missing post is
    an error.
    """
    if not await _post_exists(db, post_id):
        raise NotFoundError(f"Post {post_id} does not exist", message="Post not found")

    q = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.id)
    )
    result = await db.execute(q)
    return [comment_to_dict(c) for c in result.unique().scalars().all()]


async def get_comment(db: AsyncSession, comment_id: int) -> dict:
    return comment_to_dict(await _load_comment(db, comment_id))


async def edit_comment(db: AsyncSession, comment_id: int, author_id: int, content: str) -> dict:
    """Replace the content of a comment owned by *author_id*."""
    comment = await _load_owned_comment(db, comment_id, author_id)
    comment.content = content
    await db.flush()
    logger.info("Comment %s edited", comment_id)
    return comment_to_dict(await _load_comment(db, comment_id))


async def delete_comment(db: AsyncSession, comment_id: int, author_id: int) -> None:
    comment = await _load_owned_comment(db, comment_id, author_id)
    post_id = comment.post_id
    await db.delete(comment)
    await db.flush()
    logger.info("Comment %s deleted from post %s", comment_id, post_id)
