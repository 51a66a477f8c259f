"""Application assembly for the relay server."""

from .container import RelayContainer
from .factory import create_app

__all__ = ["RelayContainer", "create_app"]
