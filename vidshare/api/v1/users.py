"""Users router: registration, profile, channels and watch history."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from vidshare.api.deps import get_current_user, get_db, get_media_store, get_optional_user
from vidshare.core.exceptions import raise_bad_request
from vidshare.core.logging import get_client_info
from vidshare.core.media import BaseMediaStore, discard_staged, stage_upload
from vidshare.schemas.common import StandardResponse
from vidshare.schemas.user import (
    ChannelProfileResponse,
    CurrentUser,
    SubscriptionStatusResponse,
    UserCreate,
    UserUpdate,
    WatchHistoryAppendRequest,
    WatchHistoryEntryResponse,
)
from vidshare.services.user_service import UserService

router = APIRouter()


@router.post(
    "/register",
    response_model=StandardResponse[CurrentUser],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    media_store: Annotated[BaseMediaStore, Depends(get_media_store)],
    full_name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File()] = None,
) -> StandardResponse[CurrentUser]:
    """
    Register a new account.

    Multipart form with full_name, email, username, password, an avatar
    file (required) and a cover_image file (optional).
    """
    try:
        user_data = UserCreate(
            full_name=full_name, email=email, username=username, password=password
        )
    except ValidationError as e:
        details: dict[str, list[str]] = {}
        for error in e.errors():
            field = str(error["loc"][-1]) if error["loc"] else "body"
            details.setdefault(field, []).append(error["msg"])
        messages = [msg for msgs in details.values() for msg in msgs]
        message = (
            "All fields are required"
            if any("All fields are required" in msg for msg in messages)
            else "Invalid registration data"
        )
        raise_bad_request("VALIDATION_ERROR", message, details=details)

    avatar_path = await stage_upload(avatar)
    cover_image_path = await stage_upload(cover_image)
    ip_address, _ = get_client_info(request)
    try:
        user = await UserService(db, media_store).register(
            user_data, avatar_path, cover_image_path, ip_address
        )
    finally:
        discard_staged(avatar_path, cover_image_path)

    return StandardResponse(data=user)


@router.patch(
    "/me",
    response_model=StandardResponse[CurrentUser],
    status_code=status.HTTP_200_OK,
)
async def update_account(
    user_data: UserUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[CurrentUser]:
    """Update full name and/or email."""
    return StandardResponse(data=UserService(db).update_account(current_user.id, user_data))


@router.patch(
    "/me/avatar",
    response_model=StandardResponse[CurrentUser],
    status_code=status.HTTP_200_OK,
)
async def update_avatar(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    media_store: Annotated[BaseMediaStore, Depends(get_media_store)],
    avatar: Annotated[UploadFile | None, File()] = None,
) -> StandardResponse[CurrentUser]:
    """Replace the avatar image."""
    local_path = await stage_upload(avatar)
    try:
        user = await UserService(db, media_store).update_avatar(current_user.id, local_path)
    finally:
        discard_staged(local_path)
    return StandardResponse(data=user)


@router.patch(
    "/me/cover-image",
    response_model=StandardResponse[CurrentUser],
    status_code=status.HTTP_200_OK,
)
async def update_cover_image(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    media_store: Annotated[BaseMediaStore, Depends(get_media_store)],
    cover_image: Annotated[UploadFile | None, File()] = None,
) -> StandardResponse[CurrentUser]:
    """Replace the cover image."""
    local_path = await stage_upload(cover_image)
    try:
        user = await UserService(db, media_store).update_cover_image(current_user.id, local_path)
    finally:
        discard_staged(local_path)
    return StandardResponse(data=user)


@router.get(
    "/me/history",
    response_model=StandardResponse[list[WatchHistoryEntryResponse]],
    status_code=status.HTTP_200_OK,
)
async def get_watch_history(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> StandardResponse[list[WatchHistoryEntryResponse]]:
    """Watched videos, most recent first."""
    entries = UserService(db).get_watch_history(current_user.id, skip=skip, limit=limit)
    return StandardResponse(
        data=[WatchHistoryEntryResponse.model_validate(entry) for entry in entries]
    )


@router.post(
    "/me/history",
    response_model=StandardResponse[WatchHistoryEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_to_watch_history(
    entry_data: WatchHistoryAppendRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[WatchHistoryEntryResponse]:
    entry = UserService(db).add_to_watch_history(current_user.id, entry_data.video_id)
    return StandardResponse(data=WatchHistoryEntryResponse.model_validate(entry))


@router.get(
    "/channels/{username}",
    response_model=StandardResponse[ChannelProfileResponse],
    status_code=status.HTTP_200_OK,
)
async def get_channel_profile(
    username: str,
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[CurrentUser | None, Depends(get_optional_user)],
) -> StandardResponse[ChannelProfileResponse]:
    """Channel profile with subscriber counts. Anonymous viewers are allowed."""
    viewer_id = viewer.id if viewer else None
    return StandardResponse(data=UserService(db).get_channel_profile(username, viewer_id))


@router.post(
    "/channels/{username}/subscription",
    response_model=StandardResponse[SubscriptionStatusResponse],
    status_code=status.HTTP_200_OK,
)
async def subscribe(
    username: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[SubscriptionStatusResponse]:
    channel_id = UserService(db).subscribe(current_user.id, username)
    return StandardResponse(data=SubscriptionStatusResponse(channel_id=channel_id, subscribed=True))


@router.delete(
    "/channels/{username}/subscription",
    response_model=StandardResponse[SubscriptionStatusResponse],
    status_code=status.HTTP_200_OK,
)
async def unsubscribe(
    username: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> StandardResponse[SubscriptionStatusResponse]:
    channel_id = UserService(db).unsubscribe(current_user.id, username)
    return StandardResponse(data=SubscriptionStatusResponse(channel_id=channel_id, subscribed=False))
