"""
Relay request handling.

``RequestHandler`` implements the three protocol operations (authenticate,
send, fetch) independently of HTTP. Each ``handle_*`` method is a boundary:
protocol failures become ERROR bodies with a fixed user-facing message and
any unexpected fault becomes ``Internal error`` without echoing details.
"""

import uuid

from pydantic import ValidationError as PydanticValidationError

from ...config.models import RelayServerConfig
from ...error_types import ErrorType, ResponseStatus
from ...exceptions import (
    DirectChatError,
    EmptyMessageError,
    InvalidCredentialsError,
    MalformedRequestError,
    PlayerOfflineError,
    TokenInvalidError,
    create_error_context,
)
from ...structured_logging.enhanced_logging_config import get_logger, log_exception_once
from ..auth.captcha import CaptchaProvider
from ..auth.token_manager import TokenManager
from ..chat.broadcast import Broadcaster
from ..game import GameBridge
from .schemas import AuthRequest, AuthResponse, FetchResponse, RelayResponse, SendRequest, WireMessage

logger = get_logger("api.handler")

COMMAND_PREFIX = "/"
INTERNAL_ERROR_MESSAGE = "Internal error"


class RequestHandler:
    """Protocol state machine behind the relay endpoints."""

    def __init__(
        self,
        config: RelayServerConfig,
        tokens: TokenManager,
        broadcaster: Broadcaster,
        game: GameBridge,
        captcha: CaptchaProvider,
    ) -> None:
        self.config = config
        self.tokens = tokens
        self.broadcaster = broadcaster
        self.history = broadcaster.history
        self.game = game
        self.captcha = captcha

    # Authenticate

    def handle_auth(self, raw_body: bytes | str) -> AuthResponse:
        """Parse an auth body and run the handshake."""
        try:
            request = self._parse(AuthRequest, raw_body)
            return self.authenticate(request.uuid, request.password, request.captcha_response)
        except DirectChatError as error:
            return AuthResponse(status=ResponseStatus.ERROR, message=error.user_friendly)
        except Exception as error:  # pylint: disable=broad-exception-caught
            log_exception_once(logger, "error", "Auth error", exc=error, exc_info=True)
            return AuthResponse(status=ResponseStatus.ERROR, message=INTERNAL_ERROR_MESSAGE)

    def authenticate(self, player_id: str | None, password: str | None, captcha_answer: str | None) -> AuthResponse:
        """
        Run the login handshake.

        The password is checked on every call, including captcha resubmissions.

        Raises:
            MalformedRequestError: Missing fields or a player id that is not a UUID
            InvalidCredentialsError: Wrong password
            PlayerOfflineError: The player is not in the game
        """
        if player_id is None or password is None:
            raise MalformedRequestError("Missing uuid or password")

        context = create_error_context(player_id=player_id, operation="authenticate")

        if password != self.config.password:
            raise InvalidCredentialsError(context=context)

        try:
            player_id = str(uuid.UUID(player_id))
        except ValueError as error:
            raise MalformedRequestError("Invalid UUID format", context=context) from error

        if not self.game.is_online(player_id):
            raise PlayerOfflineError(context=context)

        if self.captcha.required:
            if captcha_answer is None:
                return self._captcha_required(player_id)
            if not self.captcha.validate(player_id, captcha_answer):
                logger.info("Captcha answer rejected, issuing a new challenge", player_id=player_id)
                return self._captcha_required(player_id)

        token = self.tokens.issue(player_id)
        player_name = self.game.player_name(player_id)
        logger.info("Player authenticated via DirectChat", player_id=player_id, player_name=player_name)
        return AuthResponse(status=ResponseStatus.OK, token=token, player_name=player_name)

    def _captcha_required(self, player_id: str) -> AuthResponse:
        challenge = self.captcha.challenge(player_id)
        return AuthResponse(status=ResponseStatus.CAPTCHA_REQUIRED, captcha_image=challenge)

    # Send

    def handle_send(self, token: str, raw_body: bytes | str) -> RelayResponse:
        """Resolve the token, then parse the body and relay one message or command."""
        try:
            player_id = self._resolve(token, "send")
            request = self._parse(SendRequest, raw_body)
            self._relay(player_id, token, request.message)
            return RelayResponse(status=ResponseStatus.OK)
        except DirectChatError as error:
            return RelayResponse(status=ResponseStatus.ERROR, message=error.user_friendly)
        except Exception as error:  # pylint: disable=broad-exception-caught
            log_exception_once(logger, "error", "Send error", exc=error, exc_info=True)
            return RelayResponse(status=ResponseStatus.ERROR, message=INTERNAL_ERROR_MESSAGE)

    def send(self, token: str, raw_message: str | None) -> None:
        """
        Relay a message for the token's player.

        Text starting with ``/`` runs as a game command under the player's
        identity; anything else is stored and broadcast.

        Raises:
            TokenInvalidError: Unknown or expired token
            PlayerOfflineError: The token's player left the game (the token is revoked)
            EmptyMessageError: Nothing left after trimming
        """
        player_id = self._resolve(token, "send")
        self._relay(player_id, token, raw_message)

    def _relay(self, player_id: str, token: str, raw_message: str | None) -> None:
        if not self.game.is_online(player_id):
            self.tokens.revoke(token)
            raise PlayerOfflineError(context=create_error_context(player_id=player_id, operation="send"))

        text = (raw_message or "").strip()
        if not text:
            raise EmptyMessageError(context=create_error_context(player_id=player_id, operation="send"))
        text = text[: self.config.max_message_length]

        if text.startswith(COMMAND_PREFIX):
            command = text[len(COMMAND_PREFIX) :]
            logger.debug("Dispatching relayed command", player_id=player_id, command=command)
            self.game.perform_command(player_id, command)
            return

        sender_name = self.game.player_name(player_id) or player_id
        self.broadcaster.broadcast_message(player_id, sender_name, text)

    # Fetch

    def handle_fetch(self, token: str, since: int) -> FetchResponse:
        """Return history newer than ``since`` for a valid token."""
        try:
            return self.fetch(token, since)
        except DirectChatError as error:
            return FetchResponse(status=ResponseStatus.ERROR, message=error.user_friendly)
        except Exception as error:  # pylint: disable=broad-exception-caught
            log_exception_once(logger, "error", "Fetch error", exc=error, exc_info=True)
            return FetchResponse(status=ResponseStatus.ERROR, message=INTERNAL_ERROR_MESSAGE)

    def fetch(self, token: str, since: int) -> FetchResponse:
        """
        Raises:
            TokenInvalidError: Unknown or expired token
        """
        self._resolve(token, "fetch")
        messages = [WireMessage(**message.to_wire()) for message in self.history.since(since)]
        return FetchResponse(status=ResponseStatus.OK, messages=messages)

    # Helpers

    def _resolve(self, token: str, operation: str) -> str:
        player_id = self.tokens.resolve(token)
        if player_id is None:
            raise TokenInvalidError(
                "Invalid or expired token",
                context=create_error_context(operation=operation),
            )
        return player_id

    @staticmethod
    def _parse(model, raw_body: bytes | str):
        try:
            return model.model_validate_json(raw_body or b"{}")
        except PydanticValidationError as error:
            raise MalformedRequestError(
                "Malformed request",
                details={"errors": error.error_count(), "error_type": ErrorType.MALFORMED_REQUEST.value},
            ) from error
