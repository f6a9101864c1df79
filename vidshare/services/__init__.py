"""Services for business logic."""

from vidshare.services.auth_service import AuthService
from vidshare.services.user_service import UserService

__all__ = [
    "AuthService",
    "UserService",
]
