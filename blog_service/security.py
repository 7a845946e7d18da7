"""
Bearer-token authentication.

Tokens are HS256 JWTs whose ``sub`` claim is the user id.  They are minted
by the identity provider with the shared ``SECRET_KEY``;
``create_access_token`` exists for tooling and tests.
"""
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from blog_service.config import settings
from blog_service.database import get_db
from blog_service.exceptions import UnauthorizedError
from blog_service.models import User
from blog_service.services import user_service

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id carried by *token* or raise ``UnauthorizedError``."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise UnauthorizedError("Token has no subject")
        return int(subject)
    except (JWTError, ValueError) as exc:
        raise UnauthorizedError(str(exc)) from exc


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from the ``Authorization: Bearer`` header."""
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")

    user_id = decode_access_token(credentials.credentials)
    user = await user_service.get_user_record(db, user_id)
    if user is None:
        raise UnauthorizedError(f"User {user_id} does not exist")
    return user
