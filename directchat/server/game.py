"""
Boundary between the relay and the host game server.

The relay never talks to the game directly; it asks a ``GameBridge`` whether a
player is present, what they are called, and hands it lines to show or
commands to run. ``InMemoryGameBridge`` backs tests and standalone runs.
"""

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@runtime_checkable
class GameBridge(Protocol):
    """Host game operations the relay depends on."""

    def is_online(self, player_id: str) -> bool: ...

    def player_name(self, player_id: str) -> str | None: ...

    def send_message(self, player_id: str, text: str) -> None: ...

    def perform_command(self, player_id: str, command: str) -> None: ...

    def has_permission(self, player_id: str, permission: str) -> bool: ...


class InMemoryGameBridge:
    """
    Thread-safe in-process game stand-in.

    Tracks online players, records every delivered line per player and every
    command executed, so behavior can be asserted without a real game.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._online: dict[str, str] = {}
        self._permissions: defaultdict[str, set[str]] = defaultdict(set)
        self.delivered: defaultdict[str, list[str]] = defaultdict(list)
        self.commands: list[tuple[str, str]] = []

    def join(self, player_id: str, name: str, permissions: set[str] | None = None) -> None:
        with self._lock:
            self._online[player_id] = name
            if permissions:
                self._permissions[player_id].update(permissions)
        logger.debug("Player joined", player_id=player_id, player_name=name)

    def leave(self, player_id: str) -> None:
        with self._lock:
            self._online.pop(player_id, None)
        logger.debug("Player left", player_id=player_id)

    def is_online(self, player_id: str) -> bool:
        with self._lock:
            return player_id in self._online

    def player_name(self, player_id: str) -> str | None:
        with self._lock:
            return self._online.get(player_id)

    def send_message(self, player_id: str, text: str) -> None:
        with self._lock:
            self.delivered[player_id].append(text)

    def perform_command(self, player_id: str, command: str) -> None:
        with self._lock:
            self.commands.append((player_id, command))
        logger.info("Command executed for player", player_id=player_id, command=command)

    def has_permission(self, player_id: str, permission: str) -> bool:
        with self._lock:
            return permission in self._permissions.get(player_id, set())
