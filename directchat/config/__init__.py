"""
Configuration module for the DirectChat relay.

Usage:
    from directchat.config import get_config

    config = get_config()
    logger.info("Relay configuration", port=config.relay.port)
"""

import sys
import threading
from functools import lru_cache
from os import getenv

from .models import AppConfig, LoggingConfig, RelayServerConfig

__all__ = ["get_config", "reset_config", "AppConfig", "LoggingConfig", "RelayServerConfig"]

_config_lock = threading.Lock()


def _is_test_mode() -> bool:
    """Detect pytest so tests always see a config built from the current environment."""
    return "pytest" in sys.modules or bool(getenv("PYTEST_CURRENT_TEST"))


@lru_cache(maxsize=1)
def _get_config_cached() -> AppConfig:
    with _config_lock:
        return AppConfig()


def get_config() -> AppConfig:
    """
    Get application configuration (cached in production, fresh in tests).

    Returns:
        AppConfig: The application configuration

    Raises:
        ValidationError: If configuration is invalid
    """
    if _is_test_mode():
        return AppConfig()
    return _get_config_cached()


def reset_config() -> None:
    """Clear the configuration cache so the next get_config() reloads the environment."""
    with _config_lock:
        _get_config_cached.cache_clear()
