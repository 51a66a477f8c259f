"""
Client session state for the relay.

    DISCONNECTED -> AUTHENTICATING -> CONNECTED -> DISCONNECTED
                         |    ^
                         v    |
                    CAPTCHA_PENDING

Alongside the state sits the independent "relay enabled" (Direct Mode) flag
the gate consults. All transitions happen on the main context; a completion
that arrives for a state the session has already left is ignored.
"""

from enum import Enum

from ..structured_logging.enhanced_logging_config import get_logger
from .display import ChatDisplay, PlayerPresence
from .main_context import MainContext
from .poller import POLL_INTERVAL_SECONDS, Poller
from .relay_client import RelayClient
from .settings import ClientSettings, SettingsStore

logger = get_logger("client.session")


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    AUTHENTICATING = "authenticating"
    CAPTCHA_PENDING = "captcha_pending"
    CONNECTED = "connected"


_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.DISCONNECTED: {SessionState.AUTHENTICATING},
    SessionState.AUTHENTICATING: {
        SessionState.CAPTCHA_PENDING,
        SessionState.CONNECTED,
        SessionState.DISCONNECTED,
    },
    SessionState.CAPTCHA_PENDING: {SessionState.AUTHENTICATING, SessionState.DISCONNECTED},
    SessionState.CONNECTED: {SessionState.AUTHENTICATING, SessionState.DISCONNECTED},
}


class ClientSession:
    """Owns connection state, the relay flag and the poller."""

    def __init__(
        self,
        settings: ClientSettings,
        store: SettingsStore,
        relay: RelayClient,
        display: ChatDisplay,
        context: MainContext,
        presence: PlayerPresence,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.settings = settings
        self.store = store
        self.relay = relay
        self.display = display
        self.context = context
        self.presence = presence
        self.state = SessionState.DISCONNECTED
        self.relay_enabled = False
        self.poller = Poller(relay, display, context, self.can_poll, interval=poll_interval)

    @property
    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    @property
    def local_player_id(self) -> str | None:
        return self.presence()

    def can_poll(self) -> bool:
        return self.is_connected and self.relay_enabled and self.local_player_id is not None

    def _transition(self, new_state: SessionState) -> bool:
        if new_state is self.state:
            return True
        if new_state not in _TRANSITIONS[self.state]:
            logger.warning("Ignoring invalid session transition", current=self.state.value, requested=new_state.value)
            return False
        logger.debug("Session state changed", previous=self.state.value, current=new_state.value)
        self.state = new_state
        return True

    def begin_authentication(self) -> bool:
        return self._transition(SessionState.AUTHENTICATING)

    def await_captcha(self) -> bool:
        return self._transition(SessionState.CAPTCHA_PENDING)

    def mark_connected(self, token: str) -> bool:
        """
        Store the token and go live: Direct Mode on, cursor reset, poller running.

        Returns:
            False when the session was not authenticating (stale completion)
        """
        if self.state is not SessionState.AUTHENTICATING:
            logger.info("Dropping stale authentication result", state=self.state.value)
            return False
        self._transition(SessionState.CONNECTED)
        self.settings.auth_token = token
        self.store.save(self.settings)
        self.set_relay_enabled(True)
        self.poller.reset_timestamp()
        self.poller.start()
        logger.info("Connected to DirectChat server", url=self.settings.current_url)
        return True

    def mark_failed(self) -> None:
        if self.state in (SessionState.AUTHENTICATING, SessionState.CAPTCHA_PENDING):
            self._transition(SessionState.DISCONNECTED)

    def set_relay_enabled(self, enabled: bool, persist: bool = False) -> None:
        self.relay_enabled = enabled
        if persist:
            self.settings.direct_mode_enabled = enabled
            self.store.save(self.settings)
        if enabled:
            logger.info("Direct Mode enabled - all chat will be redirected to API")
        else:
            logger.info("Direct Mode disabled - chat will be sent normally")

    def disconnect(self) -> None:
        """Stop polling, forget the token and persist."""
        self.poller.stop()
        self._transition(SessionState.DISCONNECTED)
        self.settings.auth_token = None
        self.store.save(self.settings)
        logger.info("Disconnected from DirectChat server")
