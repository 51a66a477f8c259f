"""
Client-side persisted relay state.

Reading and writing the settings file belongs to the host; the relay client
only works with the plain fields below and asks a ``SettingsStore`` to
persist them after each change.
"""

from typing import Protocol

from pydantic import BaseModel


class ClientSettings(BaseModel):
    """Connection settings remembered between game sessions."""

    current_url: str = ""
    password: str = ""
    auth_token: str | None = None
    direct_mode_enabled: bool = False

    @property
    def is_secure_connection(self) -> bool:
        return self.current_url.lower().startswith("https://")


class SettingsStore(Protocol):
    """Persistence collaborator for ClientSettings."""

    def save(self, settings: ClientSettings) -> None: ...


class MemorySettingsStore:
    """Keeps the last saved snapshot in memory."""

    def __init__(self) -> None:
        self.saved: ClientSettings | None = None
        self.save_count = 0

    def save(self, settings: ClientSettings) -> None:
        self.saved = settings.model_copy()
        self.save_count += 1
