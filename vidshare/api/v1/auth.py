"""Authentication router for login, token refresh, logout and password changes."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request, Response, status
from sqlalchemy.orm import Session

from vidshare.api.deps import get_current_user, get_db
from vidshare.core.auth.dependencies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from vidshare.core.config import get_settings
from vidshare.core.logging import get_client_info
from vidshare.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshTokenRequest,
    TokenResponse,
)
from vidshare.schemas.common import StandardResponse
from vidshare.schemas.user import CurrentUser
from vidshare.services.auth_service import AuthService

router = APIRouter()

settings = get_settings()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Send both tokens as HTTP-only cookies."""
    common = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.COOKIE_SAMESITE,
        "domain": settings.COOKIE_DOMAIN or None,
    }
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **common,
    )
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **common,
    )


def _clear_auth_cookies(response: Response) -> None:
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=key,
            domain=settings.COOKIE_DOMAIN or None,
            samesite=settings.COOKIE_SAMESITE,
        )


@router.post(
    "/login",
    response_model=StandardResponse[LoginResponse],
    status_code=status.HTTP_200_OK,
)
async def login(
    login_data: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[LoginResponse]:
    """
    Authenticate with username or email and password.

    Returns the account and a new token pair; the tokens are also set as
    HTTP-only cookies. A previous session of the same account ends.
    """
    ip_address, _ = get_client_info(request)

    result = AuthService(db).login(
        login_data.username, login_data.email, login_data.password, ip_address
    )

    _set_auth_cookies(response, result.access_token, result.refresh_token)
    return StandardResponse(
        data=LoginResponse(
            user=result.user,
            access_token=result.access_token,
            refresh_token=result.refresh_token,
        )
    )


@router.post(
    "/refresh-token",
    response_model=StandardResponse[TokenResponse],
    status_code=status.HTTP_200_OK,
)
async def refresh_token(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    refresh_data: RefreshTokenRequest | None = Body(None),
) -> StandardResponse[TokenResponse]:
    """
    Exchange the current refresh token for a new token pair.

    Reads the refresh token from the cookie first and falls back to the
    `refreshToken` body field. The presented token cannot be used again.
    """
    presented = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not presented and refresh_data is not None:
        presented = refresh_data.refresh_token

    ip_address, _ = get_client_info(request)
    tokens = AuthService(db).refresh(presented, ip_address)

    _set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return StandardResponse(
        data=TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )
    )


@router.post(
    "/logout",
    response_model=StandardResponse[MessageResponse],
    status_code=status.HTTP_200_OK,
)
async def logout(
    request: Request,
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[MessageResponse]:
    """End the current session and clear the token cookies."""
    ip_address, _ = get_client_info(request)
    AuthService(db).logout(current_user.id, ip_address)

    _clear_auth_cookies(response)
    return StandardResponse(data=MessageResponse(message="User logged out"))


@router.post(
    "/change-password",
    response_model=StandardResponse[MessageResponse],
    status_code=status.HTTP_200_OK,
)
async def change_password(
    password_data: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[MessageResponse]:
    """Change the password after re-checking the current one."""
    AuthService(db).change_password(
        current_user.id, password_data.old_password, password_data.new_password
    )
    return StandardResponse(data=MessageResponse(message="Password changed successfully"))


@router.get(
    "/me",
    response_model=StandardResponse[CurrentUser],
    status_code=status.HTTP_200_OK,
)
async def get_current_user_info(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> StandardResponse[CurrentUser]:
    """Get the authenticated account."""
    return StandardResponse(data=current_user)
