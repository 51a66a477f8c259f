"""
Structlog-based logging configuration for DirectChat.

This module provides the logging pipeline shared by the relay server and the
relay client: context variables (MDC) for per-request correlation, redaction
of credentials, and routing of uvicorn's loggers into the same output.
"""

import logging
import re
import sys
import uuid
from datetime import UTC, datetime
from typing import Any

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)
from structlog.stdlib import BoundLogger, LoggerFactory

logger = structlog.get_logger(__name__)

_LOGGING_INITIALIZED = False

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

SENSITIVE_KEYS = (
    "password",
    "token",
    "secret",
    "credential",
    "authorization",
    "bearer",
    "captcha_response",
)


def sanitize_sensitive_data(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive data from log entries.

    Passwords, bearer tokens and captcha answers must never reach a log file,
    so any key that looks like one is replaced with ``[REDACTED]``.

    Args:
        _logger: Logger instance (unused)
        _name: Logger name (unused)
        event_dict: Event dictionary to sanitize

    Returns:
        Sanitized event dictionary
    """

    def sanitize_dict(d: dict[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, dict):
                sanitized[key] = sanitize_dict(value)
            elif isinstance(key, str) and any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        return sanitized

    return sanitize_dict(event_dict)


def add_request_context(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Add timestamp and logger name to log entries.

    Args:
        _logger: Logger instance (unused)
        _name: Logger name (unused)
        event_dict: Event dictionary to enhance

    Returns:
        Enhanced event dictionary
    """
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(UTC).isoformat()
    if "logger_name" not in event_dict:
        event_dict["logger_name"] = _name
    return event_dict


def strip_ansi_renderer(bound_logger: Any, name: str, event_dict: dict[str, Any]) -> str:
    """Key/value renderer that strips ANSI escape sequences."""
    formatted = structlog.processors.KeyValueRenderer()(bound_logger, name, event_dict)
    return _ANSI_ESCAPE.sub("", formatted)


def configure_structlog(log_level: str = "INFO", log_format: str = "human") -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: ``json`` for JSON lines, ``human`` for key/value output
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers = []
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)

    processors: list[Any] = [
        # Security first - sanitize sensitive data
        sanitize_sensitive_data,
        add_request_context,
        merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Any = structlog.processors.JSONRenderer() if log_format == "json" else strip_ansi_renderer

    structlog.configure(
        processors=processors + [renderer],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(log_level: str = "INFO", log_format: str = "human", *, force_reconfigure: bool = False) -> None:
    """
    Set up logging once per process.

    Args:
        log_level: Logging level name
        log_format: Output format (``json`` or ``human``)
        force_reconfigure: When True, reconfigure even if already initialized
    """
    global _LOGGING_INITIALIZED  # pylint: disable=global-statement

    if _LOGGING_INITIALIZED and not force_reconfigure:
        get_logger("directchat.logging.setup").debug("setup_logging skipped; logging already initialized")
        return

    configure_structlog(log_level, log_format)
    _configure_uvicorn_logging()

    get_logger("directchat.logging").info(
        "Logging system initialized",
        log_level=log_level,
        log_format=log_format,
        security_sanitization=True,
    )
    _LOGGING_INITIALIZED = True


def _configure_uvicorn_logging() -> None:
    """Route uvicorn's loggers through the root handler."""
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True


def bind_request_context(
    correlation_id: str | None = None,
    player_id: str | None = None,
    request_id: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Bind request context to the current logging context.

    Args:
        correlation_id: Unique correlation ID for the request
        player_id: Player ID if available
        request_id: Request ID if available
        **kwargs: Additional context variables
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    context_vars = {
        "correlation_id": correlation_id,
        "player_id": player_id,
        "request_id": request_id,
        **kwargs,
    }
    bind_contextvars(**{k: v for k, v in context_vars.items() if v is not None})


def clear_request_context() -> None:
    """Clear the current request context from logging."""
    clear_contextvars()


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    return structlog.contextvars.get_contextvars()


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a structlog logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def log_exception_once(
    bound_logger: BoundLogger,
    level: str,
    message: str,
    *,
    exc: Exception | None = None,
    **kwargs: Any,
) -> None:
    """
    Log an exception once, skipping exceptions that already logged themselves.

    Args:
        bound_logger: Structlog bound logger instance.
        level: Logging level to use (for example, "error" or "warning").
        message: Log message to emit.
        exc: Optional exception to include in the log entry.
        **kwargs: Additional key-value pairs for structured logging.
    """
    if exc is not None:
        if getattr(exc, "already_logged", False):
            return
        kwargs.setdefault("error_type", type(exc).__name__)
        kwargs.setdefault("error", str(exc))

    log_method = getattr(bound_logger, level.lower(), bound_logger.error)
    log_method(message, **kwargs)

    if exc is not None:
        try:
            exc.already_logged = True  # type: ignore[attr-defined]
        except AttributeError:
            pass
