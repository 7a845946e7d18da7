"""
User service: the directory that posts, comments and likes point at.

Accounts are created here so that authors can be resolved to a name and
email; credentials live with the identity provider that issues tokens.
"""
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.exceptions import ConflictError, NotFoundError
from blog_service.models import User
from blog_service.schemas import UserCreate


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def author_to_dict(user: User | None) -> dict | None:
    """Public author fields embedded in post and comment payloads."""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_user_record(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> dict:
    user = await get_user_record(db, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} does not exist", message="User not found")
    return user_to_dict(user)


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create a user and return its serialised dict.

    Email uniqueness is enforced by the database; a duplicate surfaces as
    ``ConflictError`` and ``get_db`` rolls the request transaction back.
    """
    user = User(name=data.name, email=data.email)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            str(exc.orig), message="A user with this email already exists"
        ) from exc
    await db.refresh(user)
    return user_to_dict(user)
