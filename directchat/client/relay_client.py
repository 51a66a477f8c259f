"""
Outbound HTTP client for the relay API.

Every public coroutine resolves to a typed result and never raises: timeouts,
connection failures and unparseable responses are logged under their own
category and then collapsed into a failed result. Calls are bounded by a
fixed per-request timeout.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx

from ..error_types import ErrorType, ResponseStatus
from ..exceptions import NetworkError, create_error_context
from ..structured_logging.enhanced_logging_config import get_logger
from .settings import ClientSettings

logger = get_logger("client.relay_client")

REQUEST_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class AuthOk:
    token: str
    player_name: str | None = None


@dataclass(frozen=True)
class CaptchaRequired:
    challenge: str | None


@dataclass(frozen=True)
class AuthFailed:
    message: str


AuthResult = AuthOk | CaptchaRequired | AuthFailed


@dataclass(frozen=True)
class RelayedMessage:
    """A chat line received from the relay."""

    sender: str
    message: str
    timestamp: int


@dataclass(frozen=True)
class FetchResult:
    ok: bool
    messages: list[RelayedMessage] = field(default_factory=list)


class RelayClient:
    """Async client for ``/api/auth``, ``/api/send`` and ``/api/fetch``."""

    def __init__(
        self,
        settings: ClientSettings,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """
        Args:
            settings: Shared client settings (URL, password, token)
            http_client: Client to issue requests with; created when omitted
            timeout: Per-request timeout in seconds
        """
        self.settings = settings
        self.timeout = timeout
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def aclose(self) -> None:
        await self._http.aclose()

    async def authenticate(self, url: str, password: str, player_id: str) -> AuthResult:
        """Start the login handshake against ``url``."""
        return await self._auth(url, {"uuid": player_id, "password": password}, "authenticate")

    async def submit_captcha(self, answer: str, player_id: str) -> AuthResult:
        """Answer a captcha; the stored URL and password are sent again."""
        body = {"uuid": player_id, "password": self.settings.password, "captcha_response": answer}
        return await self._auth(self.settings.current_url, body, "submit_captcha")

    async def send(self, message: str) -> bool:
        """Relay one chat line or slash command. True only on a confirmed OK."""
        token = self.settings.auth_token
        if token is None:
            return False
        try:
            payload = await self._request(
                "POST",
                f"{self.settings.current_url}/api/send",
                "send",
                json={"message": message},
                headers=self._bearer(token),
            )
        except NetworkError:
            return False
        return payload.get("status") == ResponseStatus.OK.value

    async def fetch(self, since: int) -> FetchResult:
        """
        Fetch messages newer than ``since``.

        ``ok`` is False for any failure; an empty list with ``ok=True`` means
        there was simply nothing new.
        """
        token = self.settings.auth_token
        if token is None:
            return FetchResult(False)
        params = {"since": since} if since > 0 else None
        try:
            payload = await self._request(
                "GET",
                f"{self.settings.current_url}/api/fetch",
                "fetch",
                params=params,
                headers=self._bearer(token),
            )
            if payload.get("status") != ResponseStatus.OK.value:
                logger.debug("Fetch rejected by relay", message=payload.get("message"))
                return FetchResult(False)
            return FetchResult(True, [self._parse_message(raw) for raw in payload.get("messages") or []])
        except NetworkError:
            return FetchResult(False)
        except (TypeError, ValueError, AttributeError) as error:
            logger.warning(
                "Fetch response has an unexpected shape",
                category=ErrorType.MALFORMED_RESPONSE.value,
                error=str(error),
            )
            return FetchResult(False)

    async def _auth(self, url: str, body: dict[str, Any], operation: str) -> AuthResult:
        try:
            payload = await self._request("POST", f"{url}/api/auth", operation, json=body)
        except NetworkError as error:
            return AuthFailed(error.user_friendly)

        status = payload.get("status", ResponseStatus.ERROR.value)
        if status == ResponseStatus.OK.value and payload.get("token"):
            return AuthOk(payload["token"], payload.get("player_name"))
        if status == ResponseStatus.CAPTCHA_REQUIRED.value:
            return CaptchaRequired(payload.get("captcha_image"))
        return AuthFailed(payload.get("message") or "Unknown error")

    async def _request(self, method: str, url: str, operation: str, **kwargs: Any) -> dict[str, Any]:
        """
        Issue one request and decode its JSON object body.

        Raises:
            NetworkError: Timeout, connection failure or malformed response
        """
        context = create_error_context(operation=operation, metadata={"url": url})
        try:
            response = await self._http.request(method, url, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as error:
            raise NetworkError("Request timed out", ErrorType.TIMEOUT, context) from error
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            raise NetworkError(f"Connection failed: {error}", ErrorType.CONNECTION_FAILED, context) from error

        try:
            payload = response.json()
        except ValueError as error:
            raise NetworkError(
                "Relay returned a non-JSON response",
                ErrorType.MALFORMED_RESPONSE,
                context,
                details={"status_code": response.status_code},
            ) from error
        if not isinstance(payload, dict):
            raise NetworkError(
                "Relay returned an unexpected JSON document",
                ErrorType.MALFORMED_RESPONSE,
                context,
                details={"status_code": response.status_code},
            )
        return payload

    @staticmethod
    def _bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _parse_message(raw: dict[str, Any]) -> RelayedMessage:
        return RelayedMessage(
            sender=str(raw.get("sender", "Unknown")),
            message=str(raw.get("message", "")),
            timestamp=int(raw.get("timestamp", 0)),
        )
