"""
Post service: business logic for the Post aggregate.

Design notes
------------
- Relationships are ``lazy="noload"``; every read spells out its eager
  loads (``joinedload`` for the author, ``selectinload`` for link and
  comment collections) so no query is issued implicitly.
- Reloads after a write use ``populate_existing`` so database-generated
  values (timestamps) and fresh collections replace what the session
  already holds.
- Tag and category names go through ``name_resolver`` on every create and
  on updates that supply them; link rows keep the order given.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
- Deleting a post removes only that post's likes and comments unless
  ``settings.LEGACY_GLOBAL_CASCADE`` is on, in which case every like and
  comment in the system goes, matching the historical behaviour.
"""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload, selectinload

from blog_service.config import settings
from blog_service.exceptions import ForbiddenError, NotFoundError
from blog_service.models import (
    Category,
    Comment,
    Like,
    Post,
    PostCategory,
    PostTag,
    Tag,
)
from blog_service.pagination import paginate
from blog_service.schemas import PostCreate, PostUpdate
from blog_service.services.comment_service import comment_to_dict
from blog_service.services.like_service import count_likes
from blog_service.services.name_resolver import resolve_names
from blog_service.services.user_service import author_to_dict

logger = logging.getLogger(__name__)

_POST_LOAD_OPTIONS = (
    joinedload(Post.author),
    selectinload(Post.tag_links),
    selectinload(Post.category_links),
    selectinload(Post.comments),
)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def post_to_dict(post: Post) -> dict:
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "author_id": post.author_id,
        "author": author_to_dict(post.author),
        "tags": [{"id": t.id, "name": t.name} for t in post.tags],
        "categories": [{"id": c.id, "name": c.name} for c in post.categories],
        "comments": [comment_to_dict(c, with_author=False) for c in post.comments],
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

async def _load_post(db: AsyncSession, post_id: int) -> Post:
    q = (
        select(Post)
        .where(Post.id == post_id)
        .options(*_POST_LOAD_OPTIONS)
        .execution_options(populate_existing=True)
    )
    post = (await db.execute(q)).unique().scalar_one_or_none()
    if post is None:
        raise NotFoundError(f"Post {post_id} does not exist", message="Post not found")
    return post


async def _load_owned_post(db: AsyncSession, post_id: int, author_id: int) -> Post:
    post = await _load_post(db, post_id)
    if post.author_id != author_id:
        raise ForbiddenError(f"User {author_id} is not the author of post {post_id}")
    return post


async def _tag_links(db: AsyncSession, names: list[str]) -> list[PostTag]:
    tags = await resolve_names(db, Tag, names)
    logger.debug("Resolved tags %r -> %r", names, [t.id for t in tags])
    return [PostTag(tag=tag, position=i) for i, tag in enumerate(tags)]


async def _category_links(db: AsyncSession, names: list[str]) -> list[PostCategory]:
    categories = await resolve_names(db, Category, names)
    logger.debug("Resolved categories %r -> %r", names, [c.id for c in categories])
    return [PostCategory(category=category, position=i) for i, category in enumerate(categories)]


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_posts(db: AsyncSession, page: int = 1, page_size: int = 5) -> dict:
    """
    Return one page of posts, newest first, with author, tags, categories
    and comments loaded.

    Two statements are issued plus the collection loads: a COUNT for the
    page total and the LIMIT/OFFSET select.
    """
    total: int = (await db.execute(select(func.count()).select_from(Post))).scalar_one()
    window = paginate(page, page_size, total)

    q = (
        select(Post)
        .options(*_POST_LOAD_OPTIONS)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(window.offset)
        .limit(window.limit)
    )
    posts = (await db.execute(q)).unique().scalars().all()

    return {
        "posts": [post_to_dict(p) for p in posts],
        "totalPages": window.total_pages,
        "currentPage": page,
    }


async def get_post(db: AsyncSession, post_id: int) -> dict:
    """Return the post with its like count attached as ``likeCount``."""
    post = await _load_post(db, post_id)
    data = post_to_dict(post)
    data["likeCount"] = await count_likes(db, post_id)
    return data


async def create_post(db: AsyncSession, author_id: int, data: PostCreate) -> dict:
    logger.info(
        "Creating post %r for user %s (tags=%r, categories=%r)",
        data.title, author_id, data.tags, data.categories,
    )
    post = Post(title=data.title, content=data.content, author_id=author_id)
    post.tag_links = await _tag_links(db, data.tags)
    post.category_links = await _category_links(db, data.categories)

    db.add(post)
    await db.flush()
    logger.info("Post %s created", post.id)
    return post_to_dict(await _load_post(db, post.id))


async def update_post(db: AsyncSession, post_id: int, author_id: int, data: PostUpdate) -> dict:
    """
    Apply the fields present (and non-null) in *data* to a post owned by
    *author_id*.  Tag and category lists replace the existing ones.
    """
    post = await _load_owned_post(db, post_id, author_id)

    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    tag_names: list[str] | None = changes.pop("tags", None)
    category_names: list[str] | None = changes.pop("categories", None)

    for field, value in changes.items():
        setattr(post, field, value)
    if tag_names is not None:
        post.tag_links = await _tag_links(db, tag_names)
    if category_names is not None:
        post.category_links = await _category_links(db, category_names)

    await db.flush()
    logger.info("Post %s updated (fields=%s)", post_id, sorted(data.model_fields_set))
    return post_to_dict(await _load_post(db, post_id))


async def delete_post(db: AsyncSession, post_id: int, author_id: int) -> None:
    """
    Delete a post owned by *author_id* together with its likes, comments
    and tag/category links.
    """
    await _load_owned_post(db, post_id, author_id)

    if settings.LEGACY_GLOBAL_CASCADE:
        logger.warning(
            "LEGACY_GLOBAL_CASCADE is on: deleting post %s removes all likes and comments",
            post_id,
        )
        await db.execute(delete(Like))
        await db.execute(delete(Comment))
    else:
        await db.execute(delete(Like).where(Like.post_id == post_id))
        await db.execute(delete(Comment).where(Comment.post_id == post_id))

    await db.execute(delete(PostTag).where(PostTag.post_id == post_id))
    await db.execute(delete(PostCategory).where(PostCategory.post_id == post_id))
    await db.execute(delete(Post).where(Post.id == post_id))
    logger.info("Post %s deleted", post_id)


async def sweep_unused_names(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """
    Remove tags and categories that no post links to any more.

    Runs after the response in its own session.  This is housekeeping: any
    failure is logged and dropped so it can never affect the caller.

    A name resolved by a request that has not committed its links yet
    looks unused here and can be removed from under that request.
    """
    try:
        async with session_factory() as session:
            tags = await session.execute(
                delete(Tag)
                .where(Tag.id.not_in(select(PostTag.tag_id)))
                .execution_options(synchronize_session=False)
            )
            categories = await session.execute(
                delete(Category)
                .where(Category.id.not_in(select(PostCategory.category_id)))
                .execution_options(synchronize_session=False)
            )
            await session.commit()
        logger.info(
            "Swept %d unused tag(s) and %d unused category(ies)",
            tags.rowcount, categories.rowcount,
        )
    except Exception as exc:
        logger.warning("Unused tag/category sweep failed: %s", exc)
