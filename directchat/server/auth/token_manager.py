"""
Bearer token lifecycle for the relay.

A player holds at most one live token. Tokens are looked up by value on every
privileged request and by player when deciding who receives a broadcast, so
both views are kept and updated together under a lock stripe chosen by the
owning player's id.
"""

import secrets
import string
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from ...structured_logging.enhanced_logging_config import get_logger

logger = get_logger("auth.token_manager")

TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
TOKEN_LENGTH = 16
LOCK_STRIPES = 16


@dataclass(frozen=True)
class SessionToken:
    """A bearer token bound to one player."""

    value: str
    player_id: str
    issued_at: float
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


def generate_token_value(length: int = TOKEN_LENGTH) -> str:
    """Random token drawn from the 62-symbol alphanumeric alphabet."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


class TokenManager:
    """
    Issues, resolves, expires and revokes session tokens.

    Expiry is lazy: an expired token is purged the next time it is looked up.
    """

    def __init__(self, token_expiry_seconds: int = 3600, clock: Callable[[], float] = time.time) -> None:
        """
        Args:
            token_expiry_seconds: Token lifetime; ``<= 0`` means tokens never expire
            clock: Source of the current time in seconds
        """
        self.token_expiry_seconds = token_expiry_seconds
        self._clock = clock
        self._by_value: dict[str, SessionToken] = {}
        self._by_player: dict[str, SessionToken] = {}
        self._stripes = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def _stripe(self, player_id: str) -> threading.Lock:
        return self._stripes[hash(player_id) % LOCK_STRIPES]

    def issue(self, player_id: str) -> str:
        """
        Issue a fresh token for a player, invalidating any previous one.

        Args:
            player_id: Player identity

        Returns:
            The new token value
        """
        now = self._clock()
        expires_at = now + self.token_expiry_seconds if self.token_expiry_seconds > 0 else None
        token = SessionToken(generate_token_value(), player_id, now, expires_at)

        with self._stripe(player_id):
            previous = self._by_player.pop(player_id, None)
            if previous is not None:
                self._by_value.pop(previous.value, None)
            self._by_value[token.value] = token
            self._by_player[player_id] = token

        logger.debug(
            "Token issued",
            player_id=player_id,
            replaced_existing=previous is not None,
            expires_at=expires_at,
        )
        return token.value

    def resolve(self, token: str) -> str | None:
        """
        Return the player a token belongs to.

        Args:
            token: Token value presented by the caller

        Returns:
            Player id, or None when the token is unknown or expired
        """
        entry = self._by_value.get(token)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._discard(entry)
            logger.debug("Expired token purged on lookup", player_id=entry.player_id)
            return None
        return entry.player_id

    def is_authenticated(self, player_id: str) -> bool:
        """True iff the player's current token exists and has not expired."""
        entry = self._by_player.get(player_id)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            self._discard(entry)
            return False
        return True

    def revoke(self, token: str) -> None:
        """Remove a token. Unknown tokens are ignored."""
        entry = self._by_value.get(token)
        if entry is not None:
            self._discard(entry)

    def revoke_for_player(self, player_id: str) -> None:
        """Remove whatever token the player holds."""
        with self._stripe(player_id):
            entry = self._by_player.pop(player_id, None)
            if entry is not None:
                self._by_value.pop(entry.value, None)
        if entry is not None:
            logger.debug("Token revoked for player", player_id=player_id)

    def revoke_all(self) -> None:
        """Remove every token."""
        for stripe in self._stripes:
            stripe.acquire()
        try:
            self._by_value.clear()
            self._by_player.clear()
        finally:
            for stripe in reversed(self._stripes):
                stripe.release()
        logger.info("All tokens revoked")

    def authenticated_players(self) -> set[str]:
        """Snapshot of players currently holding a token."""
        return set(self._by_player.copy())

    def _discard(self, entry: SessionToken) -> None:
        # Only drop the player mapping if it still points at this exact token;
        # a concurrent issue() may already have replaced it.
        with self._stripe(entry.player_id):
            self._by_value.pop(entry.value, None)
            if self._by_player.get(entry.player_id) is entry:
                del self._by_player[entry.player_id]
