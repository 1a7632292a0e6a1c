import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shared_lib.security import TokenError, decode_token
from vidshare.app.config import get_settings
from vidshare.app.db import get_db
from vidshare.app.exceptions import Unauthorized
from vidshare.app.models import User

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/users/login", auto_error=False)


def _extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    return bearer or request.cookies.get(ACCESS_TOKEN_COOKIE)


async def _resolve_user(token: str, db: AsyncSession) -> User:
    try:
        payload = decode_token(token, get_settings().ACCESS_TOKEN_SECRET)
        user_id = uuid.UUID(payload["sub"])
    except (TokenError, ValueError):
        raise Unauthorized("Invalid access token")

    user = await db.get(User, user_id)
    if user is None:
        raise Unauthorized("Invalid access token")
    return user


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """The authenticated user, from a bearer token or the access token cookie."""
    token = _extract_token(request, token)
    if not token:
        raise Unauthorized("Unauthorized request")
    return await _resolve_user(token, db)


async def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous callers get None."""
    token = _extract_token(request, token)
    if not token:
        return None
    try:
        return await _resolve_user(token, db)
    except Unauthorized:
        return None
