"""
Native chat guard.

Once the relay is installed, in-game chat and commands are only allowed for
players who authenticated through it. The game's chat and command hooks ask
this guard before letting a line through; the ``/directchat`` command and the
bypass permission are always let through.
"""

from ...structured_logging.enhanced_logging_config import get_logger
from ..auth.token_manager import TokenManager
from ..game import GameBridge

logger = get_logger("communications.guard")

ACCESS_DENIED_MESSAGE = "Access Denied. Please connect via DirectChat Mod to speak."
CONTROL_COMMAND = "directchat"
BYPASS_PERMISSION = "directchat.bypass"


class ChatGuard:
    """Decides whether a player's native chat or command may proceed."""

    def __init__(self, tokens: TokenManager, game: GameBridge) -> None:
        self.tokens = tokens
        self.game = game

    def allow_chat(self, player_id: str) -> bool:
        """
        Check a native chat line.

        Returns:
            True to let the line through, False to cancel it (the player is told why)
        """
        if self.game.has_permission(player_id, BYPASS_PERMISSION):
            return True
        if self.tokens.is_authenticated(player_id):
            return True
        self.game.send_message(player_id, ACCESS_DENIED_MESSAGE)
        logger.debug("Blocked chat from unauthenticated player", player_id=player_id)
        return False

    def allow_command(self, player_id: str, command_line: str) -> bool:
        """
        Check a native command line (with its leading slash).

        Returns:
            True to let the command run, False to cancel it
        """
        if command_line.lower().startswith("/" + CONTROL_COMMAND):
            return True
        if self.game.has_permission(player_id, BYPASS_PERMISSION):
            return True
        if self.tokens.is_authenticated(player_id):
            return True
        self.game.send_message(player_id, ACCESS_DENIED_MESSAGE)
        logger.debug("Blocked command from unauthenticated player", player_id=player_id, command=command_line)
        return False

    def on_player_quit(self, player_id: str) -> None:
        """Drop the player's relay session when they leave the game."""
        self.tokens.revoke_for_player(player_id)
        logger.debug("Player disconnected, token invalidated", player_id=player_id)
