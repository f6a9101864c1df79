"""Watch history repository for data access operations."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from vidshare.models.watch_history import WatchHistoryEntry


class WatchHistoryRepository:
    """Repository for watch history entries. Entries are only ever appended."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    def append(
        self, user_id: UUID, video_id: str, watched_at: datetime | None = None
    ) -> WatchHistoryEntry:
        entry = WatchHistoryEntry(user_id=user_id, video_id=video_id)
        if watched_at is not None:
            entry.watched_at = watched_at
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def list_for_user(
        self, user_id: UUID, skip: int = 0, limit: int = 50
    ) -> list[WatchHistoryEntry]:
        """Entries for a user, most recent first."""
        return (
            self.db.query(WatchHistoryEntry)
            .filter(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.watched_at.desc(), WatchHistoryEntry.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
