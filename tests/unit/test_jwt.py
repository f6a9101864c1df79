"""Unit tests for JWT token creation and validation utilities."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt

from vidshare.core.auth.jwt import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_expires_at,
    get_subject_id,
)
from vidshare.core.config import get_settings
from vidshare.core.exceptions import InvalidToken, TokenExpired

settings = get_settings()


def test_create_access_token():
    """Test that create_access_token creates a decodable access token."""
    user_id = uuid4()
    token = create_access_token({"sub": str(user_id), "username": "alice"})

    decoded = decode_access_token(token)

    assert decoded["sub"] == str(user_id)
    assert decoded["username"] == "alice"
    assert decoded["type"] == "access"
    assert "exp" in decoded
    assert "iat" in decoded


def test_access_token_default_expiry():
    token = create_access_token({"sub": str(uuid4())})

    expires_at = get_expires_at(decode_access_token(token))
    expected = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    assert abs((expires_at - expected).total_seconds()) < 10


def test_create_refresh_token():
    """Test that create_refresh_token creates a valid refresh token."""
    user_id = uuid4()
    token = create_refresh_token(user_id)

    decoded = decode_refresh_token(token)

    assert decoded["sub"] == str(user_id)
    assert decoded["type"] == "refresh"
    assert get_subject_id(decoded) == user_id


def test_refresh_tokens_minted_together_differ():
    """Two refresh tokens for the same user in the same second are distinct."""
    user_id = uuid4()

    assert create_refresh_token(user_id) != create_refresh_token(user_id)


def test_access_and_refresh_use_different_keys():
    """A token signed with one secret is rejected by the other decoder."""
    user_id = uuid4()

    with pytest.raises(InvalidToken):
        decode_access_token(create_refresh_token(user_id))
    with pytest.raises(InvalidToken):
        decode_refresh_token(create_access_token({"sub": str(user_id)}))


def test_token_type_is_checked():
    """A token with the right key but the wrong type claim is rejected."""
    token = jwt.encode(
        {
            "sub": str(uuid4()),
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            "type": "access",
        },
        settings.REFRESH_TOKEN_SECRET,
        algorithm=settings.ALGORITHM,
    )

    with pytest.raises(InvalidToken):
        decode_refresh_token(token)


def test_expired_access_token():
    """Test that expired access tokens raise TokenExpired."""
    token = create_access_token(
        {"sub": str(uuid4())}, expires_delta=timedelta(seconds=-1)
    )

    with pytest.raises(TokenExpired) as exc_info:
        decode_access_token(token)

    assert exc_info.value.code == "AUTH_TOKEN_EXPIRED"


def test_expired_refresh_token():
    token = create_refresh_token(uuid4(), expires_delta=timedelta(seconds=-1))

    with pytest.raises(TokenExpired):
        decode_refresh_token(token)


def test_decode_malformed_token():
    with pytest.raises(InvalidToken) as exc_info:
        decode_access_token("invalid.token.string")

    assert exc_info.value.code == "AUTH_INVALID_TOKEN"


def test_decode_token_without_subject():
    token = jwt.encode(
        {
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            "type": "access",
        },
        settings.ACCESS_TOKEN_SECRET,
        algorithm=settings.ALGORITHM,
    )

    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_get_subject_id_rejects_non_uuid():
    with pytest.raises(InvalidToken):
        get_subject_id({"sub": "not-a-uuid"})
