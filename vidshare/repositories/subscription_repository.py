"""Subscription repository for data access operations."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from vidshare.models.subscription import Subscription


class SubscriptionRepository:
    """Repository for channel subscriptions."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    def get(self, subscriber_id: UUID, channel_id: UUID) -> Subscription | None:
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.subscriber_id == subscriber_id,
                Subscription.channel_id == channel_id,
            )
            .first()
        )

    def create(self, subscriber_id: UUID, channel_id: UUID) -> Subscription:
        subscription = Subscription(subscriber_id=subscriber_id, channel_id=channel_id)
        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def delete(self, subscription: Subscription) -> None:
        self.db.delete(subscription)
        self.db.commit()

    def count_subscribers(self, channel_id: UUID) -> int:
        """Number of users subscribed to the channel."""
        return (
            self.db.query(func.count(Subscription.id))
            .filter(Subscription.channel_id == channel_id)
            .scalar()
        )

    def count_subscriptions(self, subscriber_id: UUID) -> int:
        """Number of channels the user is subscribed to."""
        return (
            self.db.query(func.count(Subscription.id))
            .filter(Subscription.subscriber_id == subscriber_id)
            .scalar()
        )
