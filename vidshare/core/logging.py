"""Structured logging configuration for security and application events.

Security events go to the ``vidshare.security`` logger as single-line
``key=value`` messages. Emails are masked and tokens are never logged.
"""

import logging
import sys
from typing import Any

from vidshare.core.config import get_settings

settings = get_settings()

# Security events (logins, refreshes, logouts, account changes)
security_logger = logging.getLogger("vidshare.security")
security_logger.setLevel(settings.LOG_LEVEL)

# Everything else in the package
app_logger = logging.getLogger("vidshare")
app_logger.setLevel(settings.LOG_LEVEL)

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(settings.LOG_LEVEL)
console_handler.setFormatter(
    logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
)

# vidshare.security propagates to vidshare, so only the parent gets a handler
if not app_logger.handlers:
    app_logger.addHandler(console_handler)


def mask_email(email: str) -> str:
    """
    Mask email address for logging (show only first 3 chars and domain).

    Args:
        email: Email address to mask.

    Returns:
        Masked email string (e.g., "ali***@example.com").
    """
    if not email or "@" not in email:
        return "***"

    local_part, domain = email.split("@", 1)
    if len(local_part) <= 3:
        return f"{'*' * len(local_part)}@{domain}"
    return f"{local_part[:3]}***@{domain}"


def mask_identifier(identifier: str) -> str:
    """Mask a login identifier, which may be a username or an email."""
    if "@" in (identifier or ""):
        return mask_email(identifier)
    return identifier


def _event(event: str, ip_address: str | None = None, **fields: Any) -> str:
    parts = [f"{key}={value}" for key, value in fields.items() if value is not None]
    if ip_address:
        parts.append(f"ip={ip_address}")
    return f"{event} - {', '.join(parts)}" if parts else event


def log_auth_success(user_id: str, identifier: str, ip_address: str | None = None) -> None:
    """
    Log successful authentication.

    Args:
        user_id: User UUID.
        identifier: Username or email used to log in (emails are masked).
        ip_address: Client IP address (optional).
    """
    security_logger.info(
        _event(
            "Authentication successful",
            ip_address,
            user_id=user_id,
            identifier=mask_identifier(identifier),
        )
    )


def log_auth_failure(identifier: str, reason: str, ip_address: str | None = None) -> None:
    """Log failed authentication attempt (wrong password, unknown user, ...)."""
    security_logger.warning(
        _event(
            "Authentication failed",
            ip_address,
            identifier=mask_identifier(identifier),
            reason=reason,
        )
    )


def log_refresh_token_used(user_id: str, ip_address: str | None = None) -> None:
    security_logger.info(_event("Refresh token used", ip_address, user_id=user_id))


def log_refresh_token_invalid(reason: str, ip_address: str | None = None) -> None:
    security_logger.warning(_event("Invalid refresh token", ip_address, reason=reason))


def log_refresh_token_reuse(user_id: str, ip_address: str | None = None) -> None:
    """
    Log presentation of a refresh token that is no longer the current one.

    Logged at error level: either the client replayed an old token or the
    token leaked and someone else rotated it first.
    """
    security_logger.error(_event("Refresh token reuse detected", ip_address, user_id=user_id))


def log_logout(user_id: str, ip_address: str | None = None) -> None:
    security_logger.info(_event("User logged out", ip_address, user_id=user_id))


def log_password_changed(user_id: str) -> None:
    security_logger.info(_event("Password changed", user_id=user_id))


def get_client_info(request: Any) -> tuple[str | None, str | None]:
    """
    Extract IP address and user agent from FastAPI request.

    Args:
        request: FastAPI Request object.

    Returns:
        Tuple of (ip_address, user_agent).
    """
    ip_address = request.client.host if getattr(request, "client", None) else None

    # Behind a proxy the first hop in X-Forwarded-For is the client
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()

    return ip_address, request.headers.get("User-Agent")


def log_user_action(
    action: str,
    user_id: str,
    target_user_id: str | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> None:
    """
    Log an account action such as registration, a profile edit or a subscription.

    Args:
        action: Action type (e.g., 'register', 'update_account', 'subscribe').
        user_id: User who performed the action.
        target_user_id: Target user ID (optional, e.g. the channel subscribed to).
        details: Additional details (optional).
        ip_address: Client IP address (optional).
    """
    security_logger.info(
        _event(
            "User action",
            ip_address,
            action=action,
            user_id=user_id,
            target_user_id=target_user_id,
            details=details or None,
        )
    )
