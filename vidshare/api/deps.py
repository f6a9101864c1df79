"""API dependencies - re-exports from core modules."""

from vidshare.core.auth.dependencies import get_current_user, get_optional_user
from vidshare.core.db.deps import get_db
from vidshare.core.media.storage import get_media_store

__all__ = [
    "get_current_user",
    "get_db",
    "get_media_store",
    "get_optional_user",
]
