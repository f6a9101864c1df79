"""Refresh token repository: the single current-session slot on each user."""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from vidshare.core.auth.token_hash import hash_token, verify_token
from vidshare.models.user import User


class RefreshTokenRepository:
    """Repository for the per-user refresh token slot.

    Only the digest of the current token is stored. Setting the slot
    overwrites it unconditionally and no history is kept. All writes are
    column-level updates, so the User model validators never run here.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    def _write(self, user_id: UUID, token_hash: str | None) -> bool:
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(refresh_token_hash=token_hash)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount > 0

    def set_current(self, user_id: UUID, token: str) -> bool:
        """Make token the user's current refresh token."""
        return self._write(user_id, hash_token(token))

    def get_current(self, user_id: UUID) -> str | None:
        """Digest of the user's current refresh token, or None if there is no session."""
        return self.db.execute(
            select(User.refresh_token_hash).where(User.id == user_id)
        ).scalar_one_or_none()

    def matches_current(self, user_id: UUID, token: str) -> bool:
        """Check whether token is the user's current refresh token."""
        return verify_token(token, self.get_current(user_id))

    def clear(self, user_id: UUID) -> None:
        """Drop the user's session. Clearing an empty slot is not an error."""
        self._write(user_id, None)

    def rotate(self, user_id: UUID, presented_token: str, new_token: str) -> bool:
        """
        Replace presented_token with new_token if it is still the current one.

        The comparison and the write are a single UPDATE, so when two
        requests present the same token only one of them sees a row updated.

        Returns:
            True if this call performed the rotation, False otherwise.
        """
        result = self.db.execute(
            update(User)
            .where(
                User.id == user_id,
                User.refresh_token_hash == hash_token(presented_token),
            )
            .values(refresh_token_hash=hash_token(new_token))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1
