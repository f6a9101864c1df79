"""FastAPI dependencies for authentication."""

from collections.abc import Mapping
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from vidshare.core.auth.jwt import decode_access_token, get_subject_id
from vidshare.core.config import get_settings
from vidshare.core.db.deps import get_db
from vidshare.core.exceptions import InvalidToken, Unauthenticated
from vidshare.repositories.user_repository import UserRepository
from vidshare.schemas.user import CurrentUser

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

settings = get_settings()


def extract_access_token(
    cookies: Mapping[str, str],
    authorization: str | None,
    cookie_first: bool = True,
) -> str | None:
    """
    Pick the access token out of the request.

    Args:
        cookies: Request cookies.
        authorization: Value of the Authorization header, if any.
        cookie_first: Prefer the accessToken cookie over the Bearer header
            when both are present.

    Returns:
        The raw token, or None if the request carries neither.
    """
    cookie_token = cookies.get(ACCESS_TOKEN_COOKIE) or None

    header_token = None
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            header_token = credentials.strip()

    if cookie_first:
        return cookie_token or header_token
    return header_token or cookie_token


def authenticate_token(token: str | None, user_repository: UserRepository) -> CurrentUser:
    """
    Resolve an access token to the account it was issued for.

    Nothing is written; the same token yields the same result until it expires.

    Args:
        token: Raw access token, or None if the request had none.
        user_repository: Store used to resolve the subject.

    Returns:
        The account without its secret fields.

    Raises:
        Unauthenticated: If no token was presented.
        InvalidToken: If the token is malformed, expired, signed with the
            wrong key, or its subject no longer exists.
    """
    if not token:
        raise Unauthenticated("Unauthorized request")

    payload = decode_access_token(token)
    user_id = get_subject_id(payload)

    user = user_repository.get_by_id(user_id)
    if user is None:
        raise InvalidToken("Invalid access token")

    return CurrentUser.model_validate(user)


def get_access_token(request: Request) -> str | None:
    """Access token from the accessToken cookie or the Bearer header."""
    return extract_access_token(
        request.cookies,
        request.headers.get("Authorization"),
        cookie_first=settings.ACCESS_TOKEN_COOKIE_FIRST,
    )


async def get_current_user(
    token: Annotated[str | None, Depends(get_access_token)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency that gates protected endpoints on a valid access token."""
    return authenticate_token(token, UserRepository(db))


async def get_optional_user(
    token: Annotated[str | None, Depends(get_access_token)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser | None:
    """Like get_current_user, but anonymous requests pass through as None."""
    if not token:
        return None
    return authenticate_token(token, UserRepository(db))
