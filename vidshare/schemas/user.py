"""User schemas for API requests and responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from vidshare.core.auth.password import MAX_PASSWORD_BYTES


def check_password_bytes(password: str) -> str:
    """Reject passwords bcrypt would truncate. The limit is in UTF-8 bytes, not characters."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


class CurrentUser(BaseModel):
    """Account as handed to request handlers.

    Built from a User record; the password hash and refresh token digest
    are not part of this schema.
    """

    id: UUID
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Schema for registering a new user."""

    full_name: str = Field(..., max_length=255)
    email: EmailStr
    username: str = Field(..., max_length=50)
    password: str = Field(..., description="User password")

    @field_validator("full_name", "username", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("All fields are required")
        return v

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        # '@' is reserved for emails
        if "@" in v:
            raise ValueError("Username cannot contain '@'")
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return check_password_bytes(v)


class UserUpdate(BaseModel):
    """Schema for updating account details."""

    full_name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None

    @field_validator("full_name")
    @classmethod
    def blank_as_missing(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def at_least_one_field(self) -> "UserUpdate":
        if not self.full_name and not self.email:
            raise ValueError("full_name or email is required")
        return self


class ChannelProfileResponse(BaseModel):
    """Public channel profile with subscription counts."""

    id: UUID
    username: str
    full_name: str
    avatar_url: str
    cover_image_url: str | None = None
    subscribers_count: int = Field(..., ge=0)
    subscribed_to_count: int = Field(..., ge=0)
    is_subscribed: bool = False


class SubscriptionStatusResponse(BaseModel):
    channel_id: UUID
    subscribed: bool


class WatchHistoryAppendRequest(BaseModel):
    video_id: str = Field(..., min_length=1, max_length=64)


class WatchHistoryEntryResponse(BaseModel):
    video_id: str
    watched_at: datetime

    model_config = ConfigDict(from_attributes=True)
