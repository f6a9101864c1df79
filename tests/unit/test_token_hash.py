"""Unit tests for refresh token digests."""

from vidshare.core.auth.token_hash import hash_token, verify_token


def test_hash_token_is_deterministic():
    assert hash_token("token-a") == hash_token("token-a")
    assert hash_token("token-a") != hash_token("token-b")


def test_hash_token_is_sha256_hex():
    digest = hash_token("token-a")

    assert len(digest) == 64
    int(digest, 16)


def test_verify_token():
    digest = hash_token("token-a")

    assert verify_token("token-a", digest) is True
    assert verify_token("token-b", digest) is False


def test_verify_token_without_stored_digest():
    """No session means nothing matches."""
    assert verify_token("token-a", None) is False
    assert verify_token("", hash_token("")) is False
