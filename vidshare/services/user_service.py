"""User service: registration, profile media, subscriptions and watch history."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidshare.core.auth.password import hash_password
from vidshare.core.exceptions import Conflict, NotFound, UpstreamFailure, raise_bad_request
from vidshare.core.logging import log_user_action
from vidshare.core.media.storage import BaseMediaStore
from vidshare.models.watch_history import WatchHistoryEntry
from vidshare.repositories.subscription_repository import SubscriptionRepository
from vidshare.repositories.user_repository import UserRepository
from vidshare.repositories.watch_history_repository import WatchHistoryRepository
from vidshare.schemas.user import ChannelProfileResponse, CurrentUser, UserCreate, UserUpdate


class UserService:
    """Service for user business logic."""

    def __init__(self, db: Session, media_store: BaseMediaStore | None = None):
        """Initialize service with database session and media store."""
        self.db = db
        self.repository = UserRepository(db)
        self.subscription_repository = SubscriptionRepository(db)
        self.watch_history_repository = WatchHistoryRepository(db)
        self.media_store = media_store

    def _get_user(self, user_id: UUID):
        user = self.repository.get_by_id(user_id)
        if user is None:
            raise NotFound.for_resource("User", str(user_id))
        return user

    def _get_channel(self, username: str):
        channel = self.repository.get_by_username(username)
        if channel is None:
            raise NotFound("Channel does not exist", code="CHANNEL_NOT_FOUND")
        return channel

    async def register(
        self,
        user_data: UserCreate,
        avatar_path: str | None,
        cover_image_path: str | None = None,
        ip_address: str | None = None,
    ) -> CurrentUser:
        """
        Create an account with its avatar and optional cover image.

        Args:
            user_data: Registration fields.
            avatar_path: Staged local avatar file (required).
            cover_image_path: Staged local cover image file (optional).
            ip_address: Client IP address for the log.

        Returns:
            The created account.

        Raises:
            Conflict: If the username or email is already taken.
            APIException: 400 AVATAR_REQUIRED if no avatar was sent.
            UpstreamFailure: If the avatar could not be uploaded.
        """
        existing = self.repository.find_by_username_or_email(
            username=user_data.username, email=user_data.email
        )
        if existing is not None:
            raise Conflict("User with email or username already exists")

        if not avatar_path:
            raise_bad_request("AVATAR_REQUIRED", "Avatar file is required")

        avatar_url = await self.media_store.upload(avatar_path)
        if not avatar_url:
            raise UpstreamFailure("Avatar upload failed", code="MEDIA_UPLOAD_FAILED")
        # A failed cover upload leaves the optional field empty
        cover_image_url = await self.media_store.upload(cover_image_path)

        user_dict = user_data.model_dump()
        user_dict["password_hash"] = hash_password(user_dict.pop("password"))
        user_dict["avatar_url"] = avatar_url
        user_dict["cover_image_url"] = cover_image_url

        try:
            user = self.repository.create(user_dict)
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name
            self.db.rollback()
            await self.media_store.delete(avatar_url)
            await self.media_store.delete(cover_image_url)
            raise Conflict("User with email or username already exists") from e

        log_user_action(
            action="register",
            user_id=str(user.id),
            details={"username": user.username},
            ip_address=ip_address,
        )
        return CurrentUser.model_validate(user)

    def get_user(self, user_id: UUID) -> CurrentUser:
        return CurrentUser.model_validate(self._get_user(user_id))

    def update_account(self, user_id: UUID, user_data: UserUpdate) -> CurrentUser:
        """
        Update full name and/or email. The record is fully validated.

        Raises:
            Conflict: If the new email belongs to another account.
        """
        patch = user_data.model_dump(exclude_none=True)
        if "email" in patch:
            owner = self.repository.find_by_username_or_email(email=patch["email"])
            if owner is not None and owner.id != user_id:
                raise Conflict("Email is already in use", code="EMAIL_ALREADY_EXISTS")

        try:
            updated = self.repository.update_fields(user_id, patch)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("Email is already in use", code="EMAIL_ALREADY_EXISTS") from e
        if not updated:
            raise NotFound.for_resource("User", str(user_id))

        log_user_action(action="update_account", user_id=str(user_id), details={"fields": sorted(patch)})
        return self.get_user(user_id)

    async def _replace_media(self, user_id: UUID, field: str, local_path: str | None) -> CurrentUser:
        if not local_path:
            raise_bad_request(f"{field.upper()}_REQUIRED", f"{field.replace('_', ' ').capitalize()} file is missing")

        url = await self.media_store.upload(local_path)
        if not url:
            raise UpstreamFailure("Error while uploading media", code="MEDIA_UPLOAD_FAILED")

        if not self.repository.update_fields(user_id, {f"{field}_url": url}):
            raise NotFound.for_resource("User", str(user_id))

        log_user_action(action=f"update_{field}", user_id=str(user_id))
        return self.get_user(user_id)

    async def update_avatar(self, user_id: UUID, local_path: str | None) -> CurrentUser:
        return await self._replace_media(user_id, "avatar", local_path)

    async def update_cover_image(self, user_id: UUID, local_path: str | None) -> CurrentUser:
        return await self._replace_media(user_id, "cover_image", local_path)

    def get_channel_profile(
        self, username: str, viewer_id: UUID | None = None
    ) -> ChannelProfileResponse:
        """Channel profile with subscriber and subscription counts."""
        channel = self._get_channel(username)
        is_subscribed = False
        if viewer_id is not None:
            is_subscribed = self.subscription_repository.get(viewer_id, channel.id) is not None

        return ChannelProfileResponse(
            id=channel.id,
            username=channel.username,
            full_name=channel.full_name,
            avatar_url=channel.avatar_url,
            cover_image_url=channel.cover_image_url,
            subscribers_count=self.subscription_repository.count_subscribers(channel.id),
            subscribed_to_count=self.subscription_repository.count_subscriptions(channel.id),
            is_subscribed=is_subscribed,
        )

    def subscribe(self, subscriber_id: UUID, channel_username: str) -> UUID:
        """Subscribe to a channel. Subscribing twice keeps a single subscription."""
        channel = self._get_channel(channel_username)
        if channel.id == subscriber_id:
            raise_bad_request("SELF_SUBSCRIPTION", "Cannot subscribe to your own channel")

        if self.subscription_repository.get(subscriber_id, channel.id) is None:
            try:
                self.subscription_repository.create(subscriber_id, channel.id)
            except IntegrityError:
                # A concurrent request created it first
                self.db.rollback()
            else:
                log_user_action(
                    action="subscribe",
                    user_id=str(subscriber_id),
                    target_user_id=str(channel.id),
                )
        return channel.id

    def unsubscribe(self, subscriber_id: UUID, channel_username: str) -> UUID:
        """Remove a subscription. Unsubscribing when not subscribed is not an error."""
        channel = self._get_channel(channel_username)
        subscription = self.subscription_repository.get(subscriber_id, channel.id)
        if subscription is not None:
            self.subscription_repository.delete(subscription)
            log_user_action(
                action="unsubscribe",
                user_id=str(subscriber_id),
                target_user_id=str(channel.id),
            )
        return channel.id

    def get_watch_history(
        self, user_id: UUID, skip: int = 0, limit: int = 50
    ) -> list[WatchHistoryEntry]:
        """Watched videos, most recent first."""
        return self.watch_history_repository.list_for_user(user_id, skip=skip, limit=limit)

    def add_to_watch_history(self, user_id: UUID, video_id: str) -> WatchHistoryEntry:
        return self.watch_history_repository.append(user_id, video_id)
