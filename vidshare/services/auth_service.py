"""Authentication service for login, token rotation, logout and password changes."""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from vidshare.core.auth import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_subject_id,
    hash_password,
    verify_password,
)
from vidshare.core.exceptions import (
    Forbidden,
    InvalidToken,
    NotFound,
    TokenReuseDetected,
    Unauthenticated,
)
from vidshare.core.logging import (
    log_auth_failure,
    log_auth_success,
    log_logout,
    log_password_changed,
    log_refresh_token_invalid,
    log_refresh_token_reuse,
    log_refresh_token_used,
)
from vidshare.models.user import User
from vidshare.repositories.refresh_token_repository import RefreshTokenRepository
from vidshare.repositories.user_repository import UserRepository
from vidshare.schemas.user import CurrentUser


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    user: CurrentUser
    access_token: str
    refresh_token: str


class AuthService:
    """Service for authentication business logic.

    Each account has at most one active session: the refresh token issued
    by the latest login or refresh. A refresh token can be exchanged once;
    the exchange replaces it.
    """

    def __init__(self, db: Session):
        """Initialize service with database session."""
        self.user_repository = UserRepository(db)
        self.refresh_token_repository = RefreshTokenRepository(db)
        self.db = db

    def issue_token_pair(self, user: User) -> TokenPair:
        """Mint an access/refresh pair for a user. Nothing is stored."""
        access_token = create_access_token({"sub": str(user.id), "username": user.username})
        refresh_token = create_refresh_token(user.id)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def login(
        self,
        username: str | None,
        email: str | None,
        password: str,
        ip_address: str | None = None,
    ) -> LoginResult:
        """
        Authenticate by username or email and open a new session.

        Any previous session of the account is replaced. Each value is only
        matched against its own column; when both are given, an account
        matching either one is used.

        Args:
            username: Username (case-insensitive), or None.
            email: Email (case-insensitive), or None.
            password: Plain text password.
            ip_address: Client IP address for the security log.

        Returns:
            The account and its new token pair.

        Raises:
            NotFound: If no account matches the identifier.
            Forbidden: If the password does not match. The stored session is
                left as it was.
        """
        identifier = username or email or ""
        user = self.user_repository.find_by_username_or_email(username=username, email=email)
        if user is None:
            log_auth_failure(identifier, "user_not_found", ip_address)
            raise NotFound("User does not exist", code="USER_NOT_FOUND")

        if not verify_password(password, user.password_hash):
            log_auth_failure(identifier, "invalid_credentials", ip_address)
            raise Forbidden("Invalid user credentials")

        tokens = self.issue_token_pair(user)
        self.refresh_token_repository.set_current(user.id, tokens.refresh_token)

        log_auth_success(str(user.id), identifier, ip_address)
        return LoginResult(
            user=CurrentUser.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    def refresh(self, presented_token: str | None, ip_address: str | None = None) -> TokenPair:
        """
        Exchange the current refresh token for a new pair.

        Args:
            presented_token: Refresh token sent by the client.
            ip_address: Client IP address for the security log.

        Returns:
            The new token pair. The presented token is no longer usable.

        Raises:
            Unauthenticated: If no token was presented.
            TokenExpired: If the token has expired (the client must log in again).
            InvalidToken: If the token is malformed, badly signed, its user is
                gone, or the user has no active session.
            TokenReuseDetected: If the token was valid but has already been
                exchanged or replaced by a newer login.
        """
        if not presented_token:
            raise Unauthenticated("Refresh token not found")

        try:
            payload = decode_refresh_token(presented_token)
            user_id = get_subject_id(payload)
        except InvalidToken as e:
            log_refresh_token_invalid(e.code.lower(), ip_address)
            raise

        user = self.user_repository.get_by_id(user_id)
        if user is None:
            log_refresh_token_invalid("user_not_found", ip_address)
            raise InvalidToken("Invalid refresh token")

        stored_hash = self.refresh_token_repository.get_current(user.id)
        if stored_hash is None:
            log_refresh_token_invalid("no_active_session", ip_address)
            raise InvalidToken("No active session", code="AUTH_SESSION_NOT_FOUND")

        if not self.refresh_token_repository.matches_current(user.id, presented_token):
            log_refresh_token_reuse(str(user.id), ip_address)
            raise TokenReuseDetected("Refresh token is expired or used")

        tokens = self.issue_token_pair(user)

        # A concurrent request may have rotated the slot since the check above
        if not self.refresh_token_repository.rotate(
            user.id, presented_token, tokens.refresh_token
        ):
            log_refresh_token_reuse(str(user.id), ip_address)
            raise TokenReuseDetected("Refresh token is expired or used")

        log_refresh_token_used(str(user.id), ip_address)
        return tokens

    def logout(self, user_id: UUID, ip_address: str | None = None) -> None:
        """End the account's session. Logging out twice is not an error."""
        self.refresh_token_repository.clear(user_id)
        log_logout(str(user_id), ip_address)

    def change_password(self, user_id: UUID, old_password: str, new_password: str) -> None:
        """
        Replace the password after re-checking the current one.

        The new hash is written on its own, without re-validating the rest
        of the record.

        Raises:
            NotFound: If the user does not exist.
            Forbidden: If old_password does not match.
        """
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFound.for_resource("User", str(user_id))

        if not verify_password(old_password, user.password_hash):
            log_auth_failure(user.username, "invalid_old_password")
            raise Forbidden("Invalid old password")

        self.user_repository.update_fields(
            user.id,
            {"password_hash": hash_password(new_password)},
            skip_validation=True,
        )
        log_password_changed(str(user.id))
