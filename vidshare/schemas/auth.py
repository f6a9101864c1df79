"""Authentication schemas for login, tokens, and password changes."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vidshare.schemas.user import CurrentUser, check_password_bytes


class LoginRequest(BaseModel):
    """Schema for login request. Either username or email identifies the account."""

    username: str | None = Field(None, description="Username")
    email: str | None = Field(None, description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator("username", "email")
    @classmethod
    def blank_as_missing(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def identifier_required(self) -> "LoginRequest":
        if not self.username and not self.email:
            raise ValueError("username or email is required")
        return self


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request body. The cookie takes precedence."""

    refresh_token: str | None = Field(
        None,
        alias="refreshToken",
        description="Refresh token to exchange for a new token pair",
    )

    model_config = ConfigDict(populate_by_name=True)


class TokenResponse(BaseModel):
    """Schema for a freshly issued token pair."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")


class LoginResponse(TokenResponse):
    """Schema for login response: the account and its new token pair."""

    user: CurrentUser


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)

    @field_validator("new_password")
    @classmethod
    def new_password_fits_bcrypt(cls, v: str) -> str:
        return check_password_bytes(v)


class MessageResponse(BaseModel):
    message: str
