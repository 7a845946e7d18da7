"""
Direct service-layer tests: business logic without HTTP, called with a
database session the way the routers call it.
"""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.database import insert_or_ignore
from blog_service.exceptions import ForbiddenError, NotFoundError
from blog_service.models import Like, Tag, User
from blog_service.schemas import PostCreate, PostUpdate
from blog_service.services import comment_service, like_service, post_service


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_user(db: AsyncSession, name: str = "svcuser") -> User:
    user = User(name=name, email=f"{name}@example.com")
    db.add(user)
    await db.flush()
    return user


async def _create_post(db: AsyncSession, author: User, **fields) -> dict:
    data = {"title": "Service post", "content": "Body"}
    data.update(fields)
    return await post_service.create_post(db, author.id, PostCreate(**data))


# ---------------------------------------------------------------------------
# post_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_posts_empty(db_session: AsyncSession):
    result = await post_service.list_posts(db_session)
    assert result == {"posts": [], "totalPages": 0, "currentPage": 1}


@pytest.mark.asyncio
async def test_create_post_via_service(db_session: AsyncSession):
    author = await _create_user(db_session)
    post = await _create_post(
        db_session, author, tags=["python", "fastapi"], categories=["tutorials"]
    )
    assert post["author"] == {"id": author.id, "name": "svcuser", "email": "svcuser@example.com"}
    assert [t["name"] for t in post["tags"]] == ["python", "fastapi"]
    assert [c["name"] for c in post["categories"]] == ["tutorials"]
    assert post["created_at"] is not None


@pytest.mark.asyncio
async def test_create_post_duplicate_tag_names(db_session: AsyncSession):
    author = await _create_user(db_session)
    post = await _create_post(db_session, author, tags=["news", "news"])
    ids = [t["id"] for t in post["tags"]]
    assert len(ids) == 2 and ids[0] == ids[1]

    tag_rows = (await db_session.execute(select(func.count()).select_from(Tag))).scalar_one()
    assert tag_rows == 1


@pytest.mark.asyncio
async def test_list_posts_pages(db_session: AsyncSession):
    author = await _create_user(db_session)
    for i in range(12):
        await _create_post(db_session, author, title=f"Post {i}")

    result = await post_service.list_posts(db_session, page=2, page_size=5)
    assert result["totalPages"] == 3
    assert result["currentPage"] == 2
    assert len(result["posts"]) == 5


@pytest.mark.asyncio
async def test_get_post_counts_only_its_likes(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    fan = await _create_user(db_session, "fan")
    liked = await _create_post(db_session, author, title="liked")
    other = await _create_post(db_session, author, title="other")
    await like_service.like_post(db_session, liked["id"], fan.id)
    await like_service.like_post(db_session, liked["id"], author.id)
    await like_service.like_post(db_session, other["id"], fan.id)

    detail = await post_service.get_post(db_session, liked["id"])
    assert detail["likeCount"] == 2


@pytest.mark.asyncio
async def test_get_post_not_found(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await post_service.get_post(db_session, 99999)


@pytest.mark.asyncio
async def test_update_post_via_service(db_session: AsyncSession):
    author = await _create_user(db_session)
    created = await _create_post(db_session, author, title="Before", tags=["old"])

    updated = await post_service.update_post(
        db_session, created["id"], author.id, PostUpdate(title="After", tags=["new-a", "new-b"])
    )
    assert updated["title"] == "After"
    assert updated["content"] == "Body"
    assert [t["name"] for t in updated["tags"]] == ["new-a", "new-b"]
    assert updated["author_id"] == author.id


@pytest.mark.asyncio
async def test_update_post_ignores_null_fields(db_session: AsyncSession):
    author = await _create_user(db_session)
    created = await _create_post(db_session, author, title="Kept", tags=["kept"])

    updated = await post_service.update_post(
        db_session, created["id"], author.id, PostUpdate(title=None, tags=None, content="New body")
    )
    assert updated["title"] == "Kept"
    assert [t["name"] for t in updated["tags"]] == ["kept"]
    assert updated["content"] == "New body"


@pytest.mark.asyncio
async def test_update_post_forbidden_leaves_post_unchanged(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    other = await _create_user(db_session, "other")
    created = await _create_post(db_session, author, title="Original")

    with pytest.raises(ForbiddenError):
        await post_service.update_post(db_session, created["id"], other.id, PostUpdate(title="Changed"))

    detail = await post_service.get_post(db_session, created["id"])
    assert detail["title"] == "Original"


@pytest.mark.asyncio
async def test_update_nonexistent_post(db_session: AsyncSession):
    author = await _create_user(db_session)
    with pytest.raises(NotFoundError):
        await post_service.update_post(db_session, 99999, author.id, PostUpdate(title="Ghost"))


@pytest.mark.asyncio
async def test_delete_post_via_service(db_session: AsyncSession):
    author = await _create_user(db_session)
    created = await _create_post(db_session, author, tags=["t"], categories=["c"])

    await post_service.delete_post(db_session, created["id"], author.id)
    with pytest.raises(NotFoundError):
        await post_service.get_post(db_session, created["id"])


@pytest.mark.asyncio
async def test_delete_post_forbidden(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    other = await _create_user(db_session, "other")
    created = await _create_post(db_session, author)

    with pytest.raises(ForbiddenError):
        await post_service.delete_post(db_session, created["id"], other.id)
    assert (await post_service.get_post(db_session, created["id"]))["id"] == created["id"]


# ---------------------------------------------------------------------------
# comment_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_and_list_comments_via_service(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    reader = await _create_user(db_session, "reader")
    post = await _create_post(db_session, author)

    comment = await comment_service.add_comment(db_session, post["id"], reader.id, "Nice")
    assert comment["author"]["name"] == "reader"

    comments = await comment_service.list_comments(db_session, post["id"])
    assert [c["id"] for c in comments] == [comment["id"]]
    assert comments[0]["author"]["email"] == "reader@example.com"


@pytest.mark.asyncio
async def test_add_comment_nonexistent_post(db_session: AsyncSession):
    user = await _create_user(db_session)
    with pytest.raises(NotFoundError):
        await comment_service.add_comment(db_session, 99999, user.id, "Ghost")


@pytest.mark.asyncio
async def test_edit_comment_by_non_author(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    other = await _create_user(db_session, "other")
    post = await _create_post(db_session, author)
    comment = await comment_service.add_comment(db_session, post["id"], author.id, "original")

    with pytest.raises(ForbiddenError):
        await comment_service.edit_comment(db_session, comment["id"], other.id, "changed")

    fetched = await comment_service.get_comment(db_session, comment["id"])
    assert fetched["content"] == "original"


@pytest.mark.asyncio
async def test_edit_comment_via_service(db_session: AsyncSession):
    author = await _create_user(db_session)
    post = await _create_post(db_session, author)
    comment = await comment_service.add_comment(db_session, post["id"], author.id, "draft")

    edited = await comment_service.edit_comment(db_session, comment["id"], author.id, "final")
    assert edited["content"] == "final"
    assert edited["author_id"] == author.id


@pytest.mark.asyncio
async def test_delete_comment_via_service(db_session: AsyncSession):
    author = await _create_user(db_session)
    post = await _create_post(db_session, author)
    comment = await comment_service.add_comment(db_session, post["id"], author.id, "bye")

    await comment_service.delete_comment(db_session, comment["id"], author.id)
    with pytest.raises(NotFoundError):
        await comment_service.get_comment(db_session, comment["id"])
    assert (await post_service.get_post(db_session, post["id"]))["comments"] == []


# ---------------------------------------------------------------------------
# like_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_unlike_without_like_is_noop(db_session: AsyncSession):
    author = await _create_user(db_session)
    post = await _create_post(db_session, author)
    assert await like_service.unlike_post(db_session, post["id"], author.id) == {
        "postId": post["id"],
        "likeCount": 0,
    }


@pytest.mark.asyncio
async def test_like_post_when_like_already_exists(db_session: AsyncSession):
    """A like row written by a concurrent request does not make like_post fail."""
    author = await _create_user(db_session)
    post = await _create_post(db_session, author)
    db_session.add(Like(post_id=post["id"], user_id=author.id))
    await db_session.flush()

    summary = await like_service.like_post(db_session, post["id"], author.id)
    assert summary == {"postId": post["id"], "likeCount": 1}


@pytest.mark.asyncio
async def test_insert_or_ignore_reports_conflicts(db_session: AsyncSession):
    author = await _create_user(db_session)
    post = await _create_post(db_session, author)
    values = {"post_id": post["id"], "user_id": author.id}

    assert await insert_or_ignore(db_session, Like, values, ["post_id", "user_id"]) is True
    assert await insert_or_ignore(db_session, Like, values, ["post_id", "user_id"]) is False
    assert await like_service.count_likes(db_session, post["id"]) == 1
