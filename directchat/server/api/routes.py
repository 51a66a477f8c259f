"""
HTTP routes for the relay API.

Routes are thin: they extract the bearer token and raw body, then run the
request handler in the worker threadpool so concurrent requests interleave
freely. Logical outcomes (including ERROR and CAPTCHA_REQUIRED) are always
HTTP 200.
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from ... import __version__
from ...error_types import ERROR_MESSAGES, ErrorType
from ...structured_logging.enhanced_logging_config import get_logger
from .handler import RequestHandler
from .schemas import HealthResponse

logger = get_logger("api.routes")

relay_router = APIRouter(prefix="/api", tags=["relay"])

BEARER_PREFIX = "Bearer "


def get_request_handler(request: Request) -> RequestHandler:
    return request.app.state.container.handler


def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        HTTPException: 401 when the header is missing or not a bearer credential
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail=ERROR_MESSAGES[ErrorType.UNAUTHORIZED])
    return authorization[len(BEARER_PREFIX) :]


def parse_since(raw: str | None) -> int:
    """Lenient cursor parsing; anything unparseable means 'from the beginning'."""
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.debug("Ignoring unparseable since parameter", since=raw)
        return 0


@relay_router.post("/auth")
async def auth(request: Request, handler: RequestHandler = Depends(get_request_handler)) -> dict:
    """Authenticate a player, possibly through a captcha round."""
    body = await request.body()
    response = await run_in_threadpool(handler.handle_auth, body)
    return response.to_wire()


@relay_router.post("/send")
async def send(
    request: Request,
    token: str = Depends(get_bearer_token),
    handler: RequestHandler = Depends(get_request_handler),
) -> dict:
    """Relay a chat line or a slash command."""
    body = await request.body()
    response = await run_in_threadpool(handler.handle_send, token, body)
    return response.to_wire()


@relay_router.get("/fetch")
async def fetch(
    since: str | None = None,
    token: str = Depends(get_bearer_token),
    handler: RequestHandler = Depends(get_request_handler),
) -> dict:
    """Return messages strictly newer than ``since`` (epoch milliseconds)."""
    cursor = parse_since(since)
    logger.debug("Fetch requested", since=cursor)
    response = await run_in_threadpool(handler.handle_fetch, token, cursor)
    return response.to_wire()


@relay_router.get("/health")
async def health(request: Request) -> dict:
    """Liveness probe."""
    container = request.app.state.container
    return HealthResponse(
        version=__version__,
        authenticated_players=len(container.tokens.authenticated_players()),
        history_size=len(container.history),
    ).model_dump(mode="json")
