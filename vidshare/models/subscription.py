"""Subscription model linking a subscriber to a channel (both are users)."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid

from vidshare.core.db.session import Base


class Subscription(Base):
    """A user (subscriber) following another user's channel."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    subscriber_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    channel_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Subscription(subscriber_id={self.subscriber_id}, channel_id={self.channel_id})>"
