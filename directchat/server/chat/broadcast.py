"""
Fan-out of relayed chat to in-game players.

Messages are stored in history for pollers and pushed as a formatted line to
every player who is both authenticated with the relay and online right now.
"""

from ...structured_logging.enhanced_logging_config import get_logger
from ..auth.token_manager import TokenManager
from ..game import GameBridge
from .chat_message import ChatMessage
from .history import HistoryManager

logger = get_logger("communications.broadcast")

CHAT_FORMAT = "[DC] {name}: {text}"
SYSTEM_FORMAT = "[DC System] {text}"


class Broadcaster:
    """Stores relayed messages and delivers them to authenticated players."""

    def __init__(self, history: HistoryManager, tokens: TokenManager, game: GameBridge) -> None:
        self.history = history
        self.tokens = tokens
        self.game = game

    def _recipients(self) -> list[str]:
        # Recomputed per call; a player leaving mid-broadcast may or may not get the line
        return [
            player_id
            for player_id in self.tokens.authenticated_players()
            if self.tokens.is_authenticated(player_id) and self.game.is_online(player_id)
        ]

    def broadcast_message(self, sender_id: str, sender_name: str, text: str) -> ChatMessage:
        """
        Append a message to history and push it to every eligible player.

        Returns:
            The stored ChatMessage
        """
        message = self.history.append(sender_id, sender_name, text)
        line = CHAT_FORMAT.format(name=sender_name, text=text)
        recipients = self._recipients()
        for player_id in recipients:
            self.game.send_message(player_id, line)

        logger.info(
            "Relayed chat message",
            sender_name=sender_name,
            content=text,
            chat_timestamp=message.timestamp,
            recipients=len(recipients),
        )
        return message

    def broadcast_system(self, text: str) -> int:
        """Push a system line to every eligible player; not stored in history."""
        line = SYSTEM_FORMAT.format(text=text)
        recipients = self._recipients()
        for player_id in recipients:
            self.game.send_message(player_id, line)
        return len(recipients)
