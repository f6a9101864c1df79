"""Custom exceptions for API and service error handling."""

from typing import Any

from fastapi import HTTPException, status


class APIException(HTTPException):
    """Custom exception for API errors with standard format.

    Used for request-shape problems detected in the routes. Business
    failures raise a ServiceError instead.

    Example:
        raise APIException(
            code="AVATAR_REQUIRED",
            message="Avatar file is required",
            status_code=status.HTTP_400_BAD_REQUEST
        )
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API exception.

        Args:
            code: Error code (e.g., 'AVATAR_REQUIRED').
            message: Human-readable error message.
            status_code: HTTP status code (default: 400).
            details: Optional additional error details.
        """
        super().__init__(
            status_code=status_code,
            detail={"error": {"code": code, "message": message, "details": details}},
        )
        self.code = code
        self.message = message
        self.details = details


def raise_bad_request(
    code: str, message: str, details: dict[str, Any] | None = None
) -> None:
    """Raise 400 Bad Request exception.

    Args:
        code: Error code.
        message: Error message.
        details: Optional error details.

    Raises:
        APIException: 400 Bad Request error.
    """
    raise APIException(
        code=code,
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        details=details,
    )


class ServiceError(Exception):
    """Base class for failures reported by services and the auth core.

    Every subclass carries a default error code and the HTTP status the
    transport layer maps it to.
    """

    code = "SERVICE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Error object in the API contract format."""
        return {"code": self.code, "message": self.message, "details": self.details}


class Unauthenticated(ServiceError):
    """No credential or token was presented."""

    code = "AUTH_UNAUTHENTICATED"
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidToken(ServiceError):
    """Signature, expiry, type or subject resolution failed."""

    code = "AUTH_INVALID_TOKEN"
    status_code = status.HTTP_401_UNAUTHORIZED


class TokenExpired(InvalidToken):
    """A well-formed token whose validity window has passed."""

    code = "AUTH_TOKEN_EXPIRED"


class TokenReuseDetected(ServiceError):
    """A refresh token that was valid but is no longer the current one."""

    code = "AUTH_REFRESH_TOKEN_REUSED"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(ServiceError):
    code = "AUTH_INVALID_CREDENTIALS"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    @classmethod
    def for_resource(cls, resource: str, resource_id: str | None = None) -> "NotFound":
        """Build a NotFound with a `<RESOURCE>_NOT_FOUND` code."""
        message = f"{resource} not found"
        if resource_id:
            message += f" (ID: {resource_id})"
        return cls(message, code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND")


class Conflict(ServiceError):
    code = "USER_ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT


class UpstreamFailure(ServiceError):
    """The database or the media host is unavailable. Safe to retry idempotent calls."""

    code = "UPSTREAM_FAILURE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
