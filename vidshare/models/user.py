"""User model with authentication support."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship, validates

from vidshare.core.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Account record: identity, credentials, profile media and session slot.

    The validators below run on ORM attribute writes. Session-slot and
    password writes go through column-level updates in the repositories
    and do not trigger them.
    """

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Digest of the single current refresh token, None when logged out
    refresh_token_hash = Column(String(64), nullable=True)

    avatar_url = Column(String(500), nullable=False)
    cover_image_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    watch_history = relationship(
        "WatchHistoryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="WatchHistoryEntry.watched_at",
    )

    @validates("username")
    def validate_username(self, key: str, value: str) -> str:
        value = (value or "").strip().lower()
        if not value:
            raise ValueError("username must not be empty")
        if "@" in value:
            raise ValueError("username must not contain '@'")
        return value

    @validates("email")
    def validate_email(self, key: str, value: str) -> str:
        value = (value or "").strip().lower()
        if "@" not in value:
            raise ValueError("email must be a valid address")
        return value

    @validates("full_name")
    def validate_full_name(self, key: str, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("full_name must not be empty")
        return value

    @validates("avatar_url")
    def validate_avatar_url(self, key: str, value: str) -> str:
        if not value:
            raise ValueError("avatar_url is required")
        return value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
