"""
Exception hierarchy for DirectChat.

Protocol failures are raised as ``DirectChatError`` subclasses inside the
relay and converted to ERROR bodies at the request-handler boundary. Nothing
in this hierarchy is ever serialized back to a caller beyond
``user_friendly``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .error_types import ERROR_MESSAGES, ErrorType
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Contextual information for error reporting."""

    player_id: str | None = None
    operation: str | None = None
    request_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "player_id": self.player_id,
            "operation": self.operation,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class DirectChatError(Exception):
    """
    Base exception for all DirectChat errors.

    Provides structured error handling with context and metadata.
    """

    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    log_level: str = "error"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        """
        Initialize a DirectChat error.

        Args:
            message: Technical error message
            context: Error context information
            details: Additional error details
            user_friendly: Message safe to return to the caller
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.user_friendly = user_friendly or ERROR_MESSAGES.get(self.error_type, message)
        self.timestamp = datetime.now()
        self.already_logged = False

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with structured context."""
        log_method = getattr(logger, self.log_level, logger.error)
        log_method(
            "DirectChat error occurred",
            error_type=self.__class__.__name__,
            category=self.error_type.value,
            message=self.message,
            context=self.context.to_dict(),
            details=self.details,
        )
        self.already_logged = True

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for diagnostics."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.error_type.value,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class AuthenticationError(DirectChatError):
    """Authentication handshake failures."""

    log_level = "warning"

    def __init__(self, message: str, error_type: ErrorType, context: ErrorContext | None = None, **kwargs):
        self.error_type = error_type
        super().__init__(message, context, **kwargs)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Invalid password", context: ErrorContext | None = None, **kwargs):
        super().__init__(message, ErrorType.INVALID_CREDENTIALS, context, **kwargs)


class PlayerOfflineError(AuthenticationError):
    def __init__(self, message: str = "Player not online", context: ErrorContext | None = None, **kwargs):
        super().__init__(message, ErrorType.PLAYER_OFFLINE, context, **kwargs)


class MalformedRequestError(AuthenticationError):
    """Request body is missing fields or is not valid JSON."""

    def __init__(self, message: str, context: ErrorContext | None = None, **kwargs):
        kwargs.setdefault("user_friendly", message)
        super().__init__(message, ErrorType.MALFORMED_REQUEST, context, **kwargs)


class TokenInvalidError(DirectChatError):
    """Token is unknown or expired; the two are not distinguished to callers."""

    error_type = ErrorType.TOKEN_INVALID
    log_level = "info"


class ValidationError(DirectChatError):
    """Message content validation errors."""

    log_level = "info"

    def __init__(self, message: str, context: ErrorContext | None = None, field: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field


class EmptyMessageError(ValidationError):
    error_type = ErrorType.EMPTY_MESSAGE

    def __init__(self, context: ErrorContext | None = None, **kwargs):
        super().__init__("Empty message", context, field="message", **kwargs)


class ConfigurationError(DirectChatError):
    """Configuration and setup errors."""

    def __init__(self, message: str, context: ErrorContext | None = None, config_key: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class NetworkError(DirectChatError):
    """
    Client-side transport failures.

    These never cross the wire; the relay client logs them and collapses them
    into a failed result.
    """

    log_level = "warning"

    def __init__(self, message: str, error_type: ErrorType, context: ErrorContext | None = None, **kwargs):
        self.error_type = error_type
        kwargs.setdefault("user_friendly", message)
        super().__init__(message, context, **kwargs)


def create_error_context(**kwargs) -> ErrorContext:
    """
    Create an error context with the given parameters.

    Args:
        **kwargs: Context parameters

    Returns:
        ErrorContext object
    """
    return ErrorContext(**kwargs)
