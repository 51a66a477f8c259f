"""
Explicit wiring of relay server components.

Every component receives its collaborators here instead of reaching for a
process-wide instance. The FastAPI app keeps the container on
``app.state.container``; tests build one directly.

USAGE:
    container = RelayContainer(config.relay, game=bridge)
    app.state.container = container

    def get_request_handler(request: Request) -> RequestHandler:
        return request.app.state.container.handler
"""

from ...config.models import RelayServerConfig
from ...structured_logging.enhanced_logging_config import get_logger
from ..api.handler import RequestHandler
from ..auth.captcha import CaptchaProvider, create_captcha_provider
from ..auth.token_manager import TokenManager
from ..chat.broadcast import Broadcaster
from ..chat.guard import ChatGuard
from ..chat.history import HistoryManager
from ..game import GameBridge, InMemoryGameBridge

logger = get_logger(__name__)


class RelayContainer:
    """Owns the relay's shared state and the services built on it."""

    def __init__(
        self,
        config: RelayServerConfig,
        game: GameBridge | None = None,
        captcha: CaptchaProvider | None = None,
        tokens: TokenManager | None = None,
        history: HistoryManager | None = None,
    ) -> None:
        self.config = config
        self.game: GameBridge = game if game is not None else InMemoryGameBridge()
        self.tokens = tokens or TokenManager(config.token_expiry)
        self.history = history or HistoryManager(config.message_history_size)
        self.captcha = captcha or create_captcha_provider(config.captcha_provider)
        self.broadcaster = Broadcaster(self.history, self.tokens, self.game)
        self.guard = ChatGuard(self.tokens, self.game)
        self.handler = RequestHandler(config, self.tokens, self.broadcaster, self.game, self.captcha)

        logger.info(
            "Relay container initialized",
            captcha_provider=self.captcha.name,
            message_history_size=config.message_history_size,
            token_expiry=config.token_expiry,
        )

    def shutdown(self) -> None:
        """Drop every session; nothing survives a restart."""
        self.tokens.revoke_all()
        logger.info("Relay container shut down")
