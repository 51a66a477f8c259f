"""Shared fixtures for client-side tests."""

from unittest.mock import AsyncMock

import pytest

from directchat.client.display import BufferedCaptchaPrompt, BufferedDisplay
from directchat.client.main_context import MainContext
from directchat.client.relay_client import FetchResult, RelayClient
from directchat.client.session import ClientSession
from directchat.client.settings import ClientSettings, MemorySettingsStore

LOCAL_PLAYER = "0f8fad5b-d9cb-469f-a165-70867728950e"


class Presence:
    """Switchable stand-in for the host's 'is the player in a world' check."""

    def __init__(self, player_id: str | None = LOCAL_PLAYER) -> None:
        self.player_id = player_id

    def __call__(self) -> str | None:
        return self.player_id


@pytest.fixture
def display() -> BufferedDisplay:
    return BufferedDisplay()


@pytest.fixture
def prompt() -> BufferedCaptchaPrompt:
    return BufferedCaptchaPrompt()


@pytest.fixture
def store() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def presence() -> Presence:
    return Presence()


@pytest.fixture
def relay() -> AsyncMock:
    """RelayClient double; every call succeeds with nothing new by default."""
    mock = AsyncMock(spec=RelayClient)
    mock.send.return_value = True
    mock.fetch.return_value = FetchResult(True, [])
    return mock


@pytest.fixture
async def context() -> MainContext:
    return MainContext.current()


@pytest.fixture
async def session(relay, display, context, store, presence):
    client_session = ClientSession(
        ClientSettings(current_url="http://relay.test", password="pw"),
        store,
        relay,
        display,
        context,
        presence,
        poll_interval=0.01,
    )
    yield client_session
    client_session.poller.shutdown()
