"""Structured logging for DirectChat."""

from .enhanced_logging_config import (
    bind_request_context,
    clear_request_context,
    get_logger,
    log_exception_once,
    setup_logging,
)

__all__ = [
    "bind_request_context",
    "clear_request_context",
    "get_logger",
    "log_exception_once",
    "setup_logging",
]
