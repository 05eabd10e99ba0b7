import uuid

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError
from app.core.security import decode_token
from app.db.session import get_db
from app.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)

# Set by POST /integrations/google/auth; the OAuth callback is a browser
# redirect and carries no bearer header.
OAUTH_SESSION_COOKIE = "cleverkit_google_oauth"
OAUTH_SESSION_PATH = "/api/v1/integrations/google"


async def user_from_token(db: AsyncSession, token: str | None) -> User | None:
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        return None
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """The authenticated user, or None. Routes pick their own 401 message."""
    token = credentials.credentials if credentials else request.cookies.get(OAUTH_SESSION_COOKIE)
    return await user_from_token(db, token)


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AppError(
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
