"""ASGI middleware and exception handlers for the relay server."""

from .correlation_middleware import CorrelationMiddleware
from .error_handling import register_error_handlers

__all__ = ["CorrelationMiddleware", "register_error_handlers"]
