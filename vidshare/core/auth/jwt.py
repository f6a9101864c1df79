"""JWT token creation and validation utilities."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt

from vidshare.core.config import get_settings
from vidshare.core.exceptions import InvalidToken, TokenExpired

settings = get_settings()

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token signed with the access secret.

    Args:
        data: Dictionary containing token payload (sub, username).
        expires_delta: Optional expiration time delta. Defaults to ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        Encoded JWT token string.

    Example:
        >>> token = create_access_token({"sub": "user_id", "username": "alice"})
        >>> len(token) > 0
        True
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update(
        {
            "exp": now + expires_delta,
            "iat": now,
            "jti": uuid4().hex,
            "type": ACCESS_TOKEN_TYPE,
        }
    )
    return jwt.encode(to_encode, settings.ACCESS_TOKEN_SECRET, algorithm=settings.ALGORITHM)


def create_refresh_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT refresh token signed with the refresh secret.

    Every token gets a random jti, so two tokens minted for the same user
    in the same second never compare equal.

    Args:
        user_id: User UUID.
        expires_delta: Optional expiration time delta. Defaults to REFRESH_TOKEN_EXPIRE_DAYS.

    Returns:
        Encoded JWT refresh token string.
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": str(user_id),
        "exp": now + expires_delta,
        "iat": now,
        "jti": uuid4().hex,
        "type": REFRESH_TOKEN_TYPE,
    }
    return jwt.encode(to_encode, settings.REFRESH_TOKEN_SECRET, algorithm=settings.ALGORITHM)


def _decode(token: str, secret: str, token_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpired(f"{token_type.capitalize()} token has expired") from e
    except JWTError as e:
        raise InvalidToken(f"Invalid {token_type} token") from e

    if payload.get("type") != token_type:
        raise InvalidToken(f"Invalid {token_type} token type")
    if not payload.get("sub"):
        raise InvalidToken(f"{token_type.capitalize()} token missing subject")
    return payload


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token.

    Args:
        token: JWT token string to decode.

    Returns:
        Decoded token payload.

    Raises:
        TokenExpired: If the token is past its expiry.
        InvalidToken: If the token is malformed, signed with another key,
            is not an access token, or has no subject.
    """
    return _decode(token, settings.ACCESS_TOKEN_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a refresh token.

    Raises:
        TokenExpired: If the token is past its expiry (the client must log in again).
        InvalidToken: For any other verification failure.
    """
    return _decode(token, settings.REFRESH_TOKEN_SECRET, REFRESH_TOKEN_TYPE)


def get_subject_id(payload: dict[str, Any]) -> UUID:
    """Return the subject claim as a UUID, raising InvalidToken if it is not one."""
    try:
        return UUID(str(payload["sub"]))
    except (KeyError, ValueError) as e:
        raise InvalidToken("Invalid user ID in token") from e


def get_expires_at(token_payload: dict[str, Any]) -> datetime:
    """Expiry of a decoded token as an aware datetime."""
    return datetime.fromtimestamp(token_payload["exp"], tz=timezone.utc)
