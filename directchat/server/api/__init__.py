"""Relay HTTP API: wire models, request handler and routes."""

from .handler import RequestHandler
from .routes import relay_router

__all__ = ["RequestHandler", "relay_router"]
