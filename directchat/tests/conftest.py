"""
Test configuration and fixtures for the DirectChat test suite.

Environment defaults are set before any relay module reads configuration.
"""

import os
import uuid

os.environ.setdefault("DIRECTCHAT_PASSWORD", "test-relay-password")
os.environ.setdefault("DIRECTCHAT_HOST", "127.0.0.1")
os.environ.setdefault("DIRECTCHAT_CAPTCHA_PROVIDER", "none")
os.environ.setdefault("LOGGING_LEVEL", "DEBUG")

import pytest
from fastapi.testclient import TestClient

from directchat.config.models import RelayServerConfig
from directchat.server.app.container import RelayContainer
from directchat.server.app.factory import create_app
from directchat.server.auth.captcha import NoCaptcha
from directchat.server.game import InMemoryGameBridge

TEST_PASSWORD = "test-relay-password"


@pytest.fixture
def relay_config() -> RelayServerConfig:
    """Relay settings with a known password and no captcha."""
    return RelayServerConfig(password=TEST_PASSWORD, captcha_provider="none")


@pytest.fixture
def game() -> InMemoryGameBridge:
    return InMemoryGameBridge()


@pytest.fixture
def player_id(game: InMemoryGameBridge) -> str:
    """An online player named Steve."""
    pid = str(uuid.uuid4())
    game.join(pid, "Steve")
    return pid


@pytest.fixture
def container(relay_config: RelayServerConfig, game: InMemoryGameBridge) -> RelayContainer:
    return RelayContainer(relay_config, game=game, captcha=NoCaptcha())


@pytest.fixture
def client(container: RelayContainer):
    """TestClient over a relay app wired to the in-memory game."""
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client
