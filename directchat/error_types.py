"""
Centralized error types and wire status constants for DirectChat.

Every protocol-level failure is named here so the server and the client agree
on categories, even though only ``status`` and ``message`` cross the wire.
"""

from enum import Enum
from typing import Any


class ResponseStatus(str, Enum):
    """Logical status carried in every response body."""

    OK = "OK"
    CAPTCHA_REQUIRED = "CAPTCHA_REQUIRED"
    ERROR = "ERROR"


class ErrorType(Enum):
    """Standardized error types for consistent categorization."""

    # Authentication
    INVALID_CREDENTIALS = "invalid_credentials"
    PLAYER_OFFLINE = "player_offline"
    CAPTCHA_REQUIRED = "captcha_required"
    CAPTCHA_INCORRECT = "captcha_incorrect"
    MALFORMED_REQUEST = "malformed_request"

    # Session
    TOKEN_INVALID = "token_invalid"

    # Message validation
    EMPTY_MESSAGE = "empty_message"

    # Transport (client-local only)
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    MALFORMED_RESPONSE = "malformed_response"

    # HTTP surface
    UNAUTHORIZED = "unauthorized"
    METHOD_NOT_ALLOWED = "method_not_allowed"

    INTERNAL_ERROR = "internal_error"


# User-facing messages sent in the ``message`` field of ERROR responses
ERROR_MESSAGES: dict[ErrorType, str] = {
    ErrorType.INVALID_CREDENTIALS: "Invalid password",
    ErrorType.PLAYER_OFFLINE: "Player not online",
    ErrorType.MALFORMED_REQUEST: "Malformed request",
    ErrorType.TOKEN_INVALID: "Invalid or expired token",
    ErrorType.EMPTY_MESSAGE: "Empty message",
    ErrorType.UNAUTHORIZED: "Missing or invalid authorization",
    ErrorType.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorType.INTERNAL_ERROR: "Internal error",
}


def create_error_payload(error_type: ErrorType, message: str | None = None) -> dict[str, Any]:
    """
    Create the ERROR body for a failed request.

    Args:
        error_type: The type of error
        message: Message override; defaults to the standard text for the type

    Returns:
        Wire-format error dictionary
    """
    return {
        "status": ResponseStatus.ERROR.value,
        "message": message or ERROR_MESSAGES.get(error_type, ERROR_MESSAGES[ErrorType.INTERNAL_ERROR]),
    }
