"""Repositories for data access operations."""

from vidshare.repositories.refresh_token_repository import RefreshTokenRepository
from vidshare.repositories.subscription_repository import SubscriptionRepository
from vidshare.repositories.user_repository import UserRepository
from vidshare.repositories.watch_history_repository import WatchHistoryRepository

__all__ = [
    "RefreshTokenRepository",
    "SubscriptionRepository",
    "UserRepository",
    "WatchHistoryRepository",
]
