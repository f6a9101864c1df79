from vidshare.core.db.session import Base
from vidshare.models.subscription import Subscription
from vidshare.models.user import User
from vidshare.models.watch_history import WatchHistoryEntry

__all__ = [
    "Base",
    "Subscription",
    "User",
    "WatchHistoryEntry",
]
