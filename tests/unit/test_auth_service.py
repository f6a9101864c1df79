"""Unit tests for AuthService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest

from vidshare.core.auth import create_refresh_token, decode_access_token, verify_password
from vidshare.core.exceptions import (
    Forbidden,
    InvalidToken,
    NotFound,
    TokenExpired,
    TokenReuseDetected,
    Unauthenticated,
)
from vidshare.core.auth.jwt import create_access_token
from vidshare.repositories.user_repository import UserRepository
from vidshare.services.auth_service import AuthService


class TestLogin:
    """Login by username or email."""

    def test_login_with_username(self, db_session, test_user):
        service = AuthService(db_session)

        result = service.login("alice", None, test_user._plain_password)

        assert result.user.id == test_user.id
        assert decode_access_token(result.access_token)["sub"] == str(test_user.id)
        assert service.refresh_token_repository.matches_current(
            test_user.id, result.refresh_token
        )

    def test_login_with_email_case_insensitive(self, db_session, test_user):
        service = AuthService(db_session)

        result = service.login(None, "ALICE@example.com", test_user._plain_password)

        assert result.user.username == "alice"

    def test_login_response_has_no_secrets(self, db_session, test_user):
        result = AuthService(db_session).login("alice", None, test_user._plain_password)

        dumped = result.user.model_dump()
        assert "password_hash" not in dumped
        assert "refresh_token_hash" not in dumped

    def test_login_unknown_user(self, db_session):
        service = AuthService(db_session)

        with pytest.raises(NotFound) as exc_info:
            service.login("nobody", None, "whatever")

        assert exc_info.value.code == "USER_NOT_FOUND"

    def test_login_wrong_password_keeps_session(self, db_session, test_user):
        """A failed login leaves the existing session untouched."""
        service = AuthService(db_session)
        first = service.login("alice", None, test_user._plain_password)

        with pytest.raises(Forbidden):
            service.login("alice", None, "wrong_password")

        assert service.refresh_token_repository.matches_current(
            test_user.id, first.refresh_token
        )

    def test_second_login_replaces_session(self, db_session, test_user):
        service = AuthService(db_session)
        first = service.login("alice", None, test_user._plain_password)
        second = service.login(None, "alice@example.com", test_user._plain_password)

        assert first.refresh_token != second.refresh_token
        with pytest.raises(TokenReuseDetected):
            service.refresh(first.refresh_token)

    def test_login_logs_failure(self, db_session, test_user):
        service = AuthService(db_session)

        with patch("vidshare.services.auth_service.log_auth_failure") as mock_log:
            with pytest.raises(Forbidden):
                service.login("alice", None, "wrong_password", ip_address="10.0.0.1")

        mock_log.assert_called_once_with("alice", "invalid_credentials", "10.0.0.1")

    def test_login_with_username_and_email(self, db_session, test_user):
        service = AuthService(db_session)

        result = service.login("alice", "alice@example.com", test_user._plain_password)

        assert result.user.id == test_user.id

    def test_email_does_not_match_username_column(self, db_session, other_user, user_factory):
        """An email login never resolves to an account whose username looks like that email."""
        mallory = user_factory("mallory", "mallory@example.com")
        repository = UserRepository(db_session)
        # Rows written before usernames rejected '@'
        repository.update_fields(
            mallory.id,
            {"username": "bob@example.com", "created_at": datetime(2000, 1, 1, tzinfo=UTC)},
            skip_validation=True,
        )
        service = AuthService(db_session)

        result = service.login(None, "bob@example.com", other_user._plain_password)

        assert result.user.id == other_user.id
        with pytest.raises(Forbidden):
            service.login(None, "bob@example.com", "test_password_wrong")

    def test_oldest_account_wins_when_fields_match_different_accounts(
        self, db_session, test_user, other_user
    ):
        UserRepository(db_session).update_fields(
            other_user.id, {"created_at": datetime(2000, 1, 1, tzinfo=UTC)}, skip_validation=True
        )

        result = AuthService(db_session).login(
            "alice", "bob@example.com", other_user._plain_password
        )

        assert result.user.id == other_user.id


class TestRefresh:
    """Refresh token rotation."""

    def test_refresh_rotates(self, db_session, test_user):
        service = AuthService(db_session)
        login = service.login("alice", None, test_user._plain_password)

        tokens = service.refresh(login.refresh_token)

        assert tokens.refresh_token != login.refresh_token
        assert tokens.access_token != login.access_token
        repo = service.refresh_token_repository
        assert repo.matches_current(test_user.id, tokens.refresh_token)
        assert not repo.matches_current(test_user.id, login.refresh_token)

    def test_refresh_reuse_detected(self, db_session, test_user):
        """The replaced token cannot be used again, and keeps being rejected."""
        service = AuthService(db_session)
        login = service.login("alice", None, test_user._plain_password)
        rotated = service.refresh(login.refresh_token)

        with pytest.raises(TokenReuseDetected):
            service.refresh(login.refresh_token)
        with pytest.raises(TokenReuseDetected):
            service.refresh(login.refresh_token)

        # The current session is not affected by the replay
        assert service.refresh(rotated.refresh_token).refresh_token

    def test_refresh_missing_token(self, db_session):
        with pytest.raises(Unauthenticated):
            AuthService(db_session).refresh(None)
        with pytest.raises(Unauthenticated):
            AuthService(db_session).refresh("")

    def test_refresh_malformed_token(self, db_session):
        with pytest.raises(InvalidToken) as exc_info:
            AuthService(db_session).refresh("not.a.token")

        assert exc_info.value.code == "AUTH_INVALID_TOKEN"

    def test_refresh_with_access_token(self, db_session, test_user):
        """An access token is signed with a different key and is rejected."""
        access_token = create_access_token({"sub": str(test_user.id)})

        with pytest.raises(InvalidToken):
            AuthService(db_session).refresh(access_token)

    def test_refresh_expired_token(self, db_session, test_user):
        service = AuthService(db_session)
        expired = create_refresh_token(test_user.id, expires_delta=timedelta(seconds=-1))
        service.refresh_token_repository.set_current(test_user.id, expired)

        with pytest.raises(TokenExpired):
            service.refresh(expired)

    def test_refresh_unknown_user(self, db_session):
        with pytest.raises(InvalidToken):
            AuthService(db_session).refresh(create_refresh_token(uuid4()))

    def test_refresh_after_logout(self, db_session, test_user):
        service = AuthService(db_session)
        login = service.login("alice", None, test_user._plain_password)
        service.logout(test_user.id)

        with pytest.raises(InvalidToken) as exc_info:
            service.refresh(login.refresh_token)

        assert exc_info.value.code == "AUTH_SESSION_NOT_FOUND"

    def test_refresh_lost_race(self, db_session, test_user):
        """If the slot changes between the check and the swap, the caller loses."""
        service = AuthService(db_session)
        login = service.login("alice", None, test_user._plain_password)

        with patch.object(service.refresh_token_repository, "rotate", return_value=False):
            with pytest.raises(TokenReuseDetected):
                service.refresh(login.refresh_token)


class TestLogout:
    def test_logout_clears_session(self, db_session, test_user):
        service = AuthService(db_session)
        service.login("alice", None, test_user._plain_password)

        service.logout(test_user.id)

        assert service.refresh_token_repository.get_current(test_user.id) is None

    def test_logout_is_idempotent(self, db_session, test_user):
        service = AuthService(db_session)

        service.logout(test_user.id)
        service.logout(test_user.id)

        assert service.refresh_token_repository.get_current(test_user.id) is None


class TestChangePassword:
    def test_change_password(self, db_session, test_user):
        service = AuthService(db_session)

        service.change_password(test_user.id, test_user._plain_password, "new_password_456")

        db_session.refresh(test_user)
        assert verify_password("new_password_456", test_user.password_hash)
        assert service.login("alice", None, "new_password_456").user.id == test_user.id
        with pytest.raises(Forbidden):
            service.login("alice", None, "test_password_123")

    def test_change_password_wrong_old_password(self, db_session, test_user):
        service = AuthService(db_session)

        with pytest.raises(Forbidden) as exc_info:
            service.change_password(test_user.id, "wrong_password", "new_password_456")

        assert exc_info.value.message == "Invalid old password"
        db_session.refresh(test_user)
        assert verify_password(test_user._plain_password, test_user.password_hash)

    def test_change_password_unknown_user(self, db_session):
        with pytest.raises(NotFound):
            AuthService(db_session).change_password(uuid4(), "a", "new_password_456")

    def test_change_password_keeps_session(self, db_session, test_user):
        service = AuthService(db_session)
        login = service.login("alice", None, test_user._plain_password)

        service.change_password(test_user.id, test_user._plain_password, "new_password_456")

        assert service.refresh_token_repository.matches_current(
            test_user.id, login.refresh_token
        )
