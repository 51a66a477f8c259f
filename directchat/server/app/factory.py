"""
FastAPI application factory for the relay server.

This module handles app creation, middleware configuration and router
registration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ... import __version__
from ...config.models import RelayServerConfig
from ...structured_logging.enhanced_logging_config import get_logger
from ..api.routes import relay_router
from ..auth.captcha import CaptchaProvider
from ..game import GameBridge
from ..middleware.correlation_middleware import CorrelationMiddleware
from ..middleware.error_handling import register_error_handlers
from .container import RelayContainer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container: RelayContainer = app.state.container
    config = container.config

    if config.uses_default_password:
        logger.warning("Using default password! Set DIRECTCHAT_PASSWORD before exposing the relay")
    if not config.require_https:
        logger.warning("HTTPS is not required; passwords and tokens travel in plain text unless TLS terminates upstream")

    logger.info(
        "DirectChat API server started",
        host=config.host,
        port=config.port,
        endpoints=["/api/auth", "/api/send", "/api/fetch", "/api/health"],
    )
    try:
        yield
    finally:
        container.shutdown()
        logger.info("DirectChat API server stopped")


def create_app(
    config: RelayServerConfig | None = None,
    game: GameBridge | None = None,
    captcha: CaptchaProvider | None = None,
    container: RelayContainer | None = None,
) -> FastAPI:
    """
    Create and configure the relay FastAPI application.

    Args:
        config: Relay settings; read from the environment when omitted
        game: Host game bridge; an in-memory bridge is used when omitted
        captcha: Captcha provider overriding the configured one
        container: Pre-built container (tests); overrides the other arguments

    Returns:
        FastAPI: The configured application instance
    """
    if container is None:
        container = RelayContainer(config or RelayServerConfig(), game=game, captcha=captcha)

    app = FastAPI(
        title="DirectChat Relay API",
        description="Relays game chat through an authenticated HTTP channel",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.container = container

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET", "POST"], allow_headers=["*"])
    app.add_middleware(CorrelationMiddleware)
    register_error_handlers(app)
    app.include_router(relay_router)

    logger.info("Relay application created", version=__version__)
    return app
