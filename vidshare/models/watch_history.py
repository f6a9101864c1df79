"""Watch history entries, appended when a user watches a video."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from vidshare.core.db.session import Base


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    video_id = Column(String(64), nullable=False)
    watched_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    user = relationship("User", back_populates="watch_history")

    def __repr__(self) -> str:
        return f"<WatchHistoryEntry(user_id={self.user_id}, video_id={self.video_id})>"
