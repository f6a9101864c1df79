"""Authentication core: credentials, tokens and request authentication."""

from vidshare.core.auth.jwt import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_subject_id,
)
from vidshare.core.auth.password import hash_password, verify_password
from vidshare.core.auth.token_hash import hash_token, verify_token

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "decode_access_token",
    "decode_refresh_token",
    "get_subject_id",
    "hash_password",
    "verify_password",
    "hash_token",
    "verify_token",
]
