"""Unit tests for SubscriptionRepository and WatchHistoryRepository."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from vidshare.repositories.subscription_repository import SubscriptionRepository
from vidshare.repositories.watch_history_repository import WatchHistoryRepository


class TestSubscriptionRepository:
    def test_create_and_count(self, db_session, test_user, other_user):
        repo = SubscriptionRepository(db_session)

        repo.create(test_user.id, other_user.id)

        assert repo.get(test_user.id, other_user.id) is not None
        assert repo.get(other_user.id, test_user.id) is None
        assert repo.count_subscribers(other_user.id) == 1
        assert repo.count_subscriptions(test_user.id) == 1
        assert repo.count_subscribers(test_user.id) == 0

    def test_duplicate_subscription_rejected(self, db_session, test_user, other_user):
        repo = SubscriptionRepository(db_session)
        repo.create(test_user.id, other_user.id)

        with pytest.raises(IntegrityError):
            repo.create(test_user.id, other_user.id)
        db_session.rollback()

    def test_delete(self, db_session, test_user, other_user):
        repo = SubscriptionRepository(db_session)
        subscription = repo.create(test_user.id, other_user.id)

        repo.delete(subscription)

        assert repo.get(test_user.id, other_user.id) is None
        assert repo.count_subscribers(other_user.id) == 0


class TestWatchHistoryRepository:
    def test_list_most_recent_first(self, db_session, test_user):
        repo = WatchHistoryRepository(db_session)
        now = datetime.now(timezone.utc)
        repo.append(test_user.id, "video-old", watched_at=now - timedelta(hours=2))
        repo.append(test_user.id, "video-new", watched_at=now)
        repo.append(test_user.id, "video-mid", watched_at=now - timedelta(hours=1))

        entries = repo.list_for_user(test_user.id)

        assert [e.video_id for e in entries] == ["video-new", "video-mid", "video-old"]

    def test_pagination(self, db_session, test_user):
        repo = WatchHistoryRepository(db_session)
        now = datetime.now(timezone.utc)
        for i in range(5):
            repo.append(test_user.id, f"video-{i}", watched_at=now + timedelta(minutes=i))

        page = repo.list_for_user(test_user.id, skip=1, limit=2)

        assert [e.video_id for e in page] == ["video-3", "video-2"]

    def test_history_is_per_user(self, db_session, test_user, other_user):
        repo = WatchHistoryRepository(db_session)
        repo.append(test_user.id, "video-a")

        assert repo.list_for_user(other_user.id) == []
