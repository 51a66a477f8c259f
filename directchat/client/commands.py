"""
The ``/directchat`` control command family.

Handlers run on the main context. ``connect`` and ``submit_captcha`` hand the
network call to a task and return right away; the outcome comes back through
``MainContext.dispatch``. Only the most recent attempt may change session
state, so an answer that arrives after the user moved on is dropped.
"""

import asyncio

from ..structured_logging.enhanced_logging_config import get_logger
from .display import CaptchaPrompt, ChatDisplay
from .main_context import MainContext
from .relay_client import AuthFailed, AuthOk, AuthResult, CaptchaRequired, RelayClient
from .session import ClientSession, SessionState

logger = get_logger("client.commands")

INSECURE_WARNING = "Connection is NOT encrypted! Your password may be visible to others."
CAPTCHA_RETRY_MESSAGE = "Incorrect captcha, please try again"

HELP_LINES = (
    "=== DirectChat Commands ===",
    "/directchat connect <url> <password> - Connect to a server",
    "/directchat disconnect - Disconnect from server",
    "/directchat toggle - Toggle Direct Mode on/off",
    "/directchat status - Show connection status",
    "/directchat help - Show this help",
)


def normalize_url(url: str) -> str:
    """Default the scheme to http:// and drop a single trailing slash."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "http://" + url
    if url.endswith("/"):
        url = url[:-1]
    return url


class ControlCommands:
    """Handlers for connect, disconnect, toggle, status and help."""

    def __init__(
        self,
        session: ClientSession,
        relay: RelayClient,
        display: ChatDisplay,
        prompt: CaptchaPrompt,
        context: MainContext,
    ) -> None:
        self.session = session
        self.relay = relay
        self.display = display
        self.prompt = prompt
        self.context = context
        self._attempt = 0
        self._captcha_player_id: str | None = None

    def execute(self, args: list[str]) -> bool:
        """Dispatch ``/directchat <args...>``; unknown or missing input shows help."""
        if not args:
            return self.help()
        name = args[0].lower()
        if name == "connect":
            if len(args) != 3:
                self.display.notice("Usage: /directchat connect <url> <password>")
                return False
            return self.connect(args[1], args[2]) is not None
        if name == "disconnect":
            return self.disconnect()
        if name == "toggle":
            return self.toggle()
        if name == "status":
            return self.status()
        return self.help()

    def connect(self, url: str, password: str) -> asyncio.Task | None:
        """
        Store the server details and start authenticating.

        Returns:
            The authentication task, or None when no local player is present
        """
        player_id = self.session.local_player_id
        if player_id is None:
            logger.debug("Connect ignored, no local player")
            return None

        url = normalize_url(url)
        if not url.lower().startswith("https://"):
            self.display.warning(INSECURE_WARNING)

        settings = self.session.settings
        settings.current_url = url
        settings.password = password
        self.session.store.save(settings)

        self.display.notice(f"Connecting to {url}...")
        self.session.begin_authentication()
        attempt = self._next_attempt()
        logger.info("Authenticating with relay", url=url, player_id=player_id)
        return self.context.spawn(self._authenticate(attempt, player_id, url, password))

    def submit_captcha(self, answer: str) -> asyncio.Task | None:
        """Send the answer typed into the captcha prompt."""
        answer = answer.strip()
        if not answer:
            self.prompt.show_error("Please enter the captcha answer")
            return None
        if self.session.state is not SessionState.CAPTCHA_PENDING:
            logger.debug("Captcha answer ignored", state=self.session.state.value)
            return None
        player_id = self._prompt_player_id()
        self.session.begin_authentication()
        attempt = self._next_attempt()
        return self.context.spawn(self._submit_captcha(attempt, player_id, answer))

    def _prompt_player_id(self) -> str:
        return self._captcha_player_id or self.session.local_player_id or ""

    def disconnect(self) -> bool:
        if not self.session.is_connected:
            self.display.notice("Not connected!")
            return False
        self._next_attempt()
        self.session.disconnect()
        self.session.set_relay_enabled(False)
        self.display.notice("Disconnected from server.")
        return True

    def toggle(self) -> bool:
        if not self.session.is_connected:
            self.display.notice("Not connected! Use /directchat connect first.")
            return False
        enabled = not self.session.relay_enabled
        self.session.set_relay_enabled(enabled, persist=True)
        if enabled:
            self.display.notice("Direct Mode ON - All chat will be redirected to API.")
        else:
            self.display.notice("Direct Mode OFF - Chat will be sent normally.")
        return True

    def status(self) -> bool:
        settings = self.session.settings
        self.display.notice("=== DirectChat Status ===")
        self.display.notice(f"Connected: {'Yes' if self.session.is_connected else 'No'}")
        self.display.notice(f"Direct Mode: {'ON' if self.session.relay_enabled else 'OFF'}")
        if settings.current_url:
            self.display.notice(f"Server: {settings.current_url}")
            self.display.notice(f"Secure: {'Yes (HTTPS)' if settings.is_secure_connection else 'No (HTTP)'}")
        return True

    def help(self) -> bool:
        for line in HELP_LINES:
            self.display.notice(line)
        return True

    def _next_attempt(self) -> int:
        self._attempt += 1
        return self._attempt

    async def _authenticate(self, attempt: int, player_id: str, url: str, password: str) -> None:
        result = await self.relay.authenticate(url, password, player_id)
        await self.context.dispatch(self._on_auth_result, attempt, player_id, result)

    async def _submit_captcha(self, attempt: int, player_id: str, answer: str) -> None:
        result = await self.relay.submit_captcha(answer, player_id)
        await self.context.dispatch(self._on_captcha_result, attempt, player_id, result)

    def _is_current(self, attempt: int) -> bool:
        if attempt != self._attempt or self.session.state is not SessionState.AUTHENTICATING:
            logger.info("Ignoring stale authentication result", attempt=attempt, state=self.session.state.value)
            return False
        return True

    def _on_auth_result(self, attempt: int, player_id: str, result: AuthResult) -> None:
        if not self._is_current(attempt):
            return
        match result:
            case AuthOk(token=token):
                self.session.mark_connected(token)
                self.display.notice("Connected successfully! Direct Mode is now ON.")
            case CaptchaRequired(challenge=challenge):
                self.session.await_captcha()
                self._captcha_player_id = player_id
                self.display.notice("Captcha required. Opening captcha screen...")
                self.prompt.open(challenge, player_id)
            case AuthFailed(message=message):
                self.session.mark_failed()
                self.display.notice(f"Authentication failed: {message}")

    def _on_captcha_result(self, attempt: int, player_id: str, result: AuthResult) -> None:
        if not self._is_current(attempt):
            return
        match result:
            case AuthOk(token=token):
                self.session.mark_connected(token)
                self._captcha_player_id = None
                self.prompt.close()
                self.display.notice("Captcha verified! Connected successfully.")
            case CaptchaRequired(challenge=challenge):
                self.session.await_captcha()
                self.prompt.show_error(CAPTCHA_RETRY_MESSAGE)
                self.prompt.open(challenge, player_id)
            case AuthFailed(message=message):
                # The prompt stays open so the player can retry or dismiss it
                self.session.await_captcha()
                self.prompt.show_error(message or "Verification failed")
