"""Token hashing utilities for refresh tokens.

Only a digest of the current refresh token is kept on the user record. A
plain SHA-256 is used rather than bcrypt because the digest has to be
deterministic: the session slot is rotated with a compare-and-swap on the
stored value.
"""

import hashlib
import hmac


def hash_token(token: str) -> str:
    """
    Hash a token (typically a JWT refresh token) for storage.

    Args:
        token: Token string to hash.

    Returns:
        Hex SHA-256 digest.

    Example:
        >>> hash_token("abc") == hash_token("abc")
        True
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def verify_token(token: str, hashed_token: str | None) -> bool:
    """
    Verify a token against its stored digest in constant time.

    Args:
        token: Plain token string to verify.
        hashed_token: Stored digest, or None when there is no session.

    Returns:
        True if token matches, False otherwise.
    """
    if not token or not hashed_token:
        return False
    return hmac.compare_digest(hash_token(token), hashed_token)
