"""Password hashing and verification utilities using bcrypt."""

import bcrypt

from vidshare.core.config import get_settings

settings = get_settings()

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    The returned string embeds the salt and the cost factor, so nothing
    else needs to be stored to verify it later.

    Args:
        password: Plain text password to hash.

    Raises:
        ValueError: If the UTF-8 encoded password is longer than MAX_PASSWORD_BYTES.

    Returns:
        Hashed password string.

    Example:
        >>> hashed = hash_password("my_password")
        >>> hashed.startswith("$2")
        True
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(encoded, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a password against its hash.

    Fails closed: a missing or malformed hash, or any bcrypt error, is
    reported as a mismatch.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Hashed password to compare against.

    Returns:
        True if password matches, False otherwise.

    Example:
        >>> hashed = hash_password("my_password")
        >>> verify_password("my_password", hashed)
        True
        >>> verify_password("wrong_password", hashed)
        False
        >>> verify_password("my_password", "not-a-bcrypt-hash")
        False
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except (ValueError, TypeError, AttributeError):
        return False
