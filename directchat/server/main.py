"""
DirectChat relay server entry point.

Run with ``directchat-server`` or ``python -m directchat.server.main``. All
settings come from ``DIRECTCHAT_*`` / ``LOGGING_*`` environment variables.
"""

from fastapi import FastAPI

from ..config import get_config
from ..structured_logging.enhanced_logging_config import get_logger, setup_logging
from .app.factory import create_app


def build_app() -> FastAPI:
    """Load configuration, set up logging and build the application."""
    config = get_config()
    setup_logging(config.effective_log_level, config.logging.format)
    return create_app(config.relay)


def main() -> None:
    import uvicorn

    config = get_config()
    app = build_app()
    get_logger(__name__).info("Starting relay server", host=config.relay.host, port=config.relay.port)
    uvicorn.run(
        app,
        host=config.relay.host,
        port=config.relay.port,
        access_log=True,
        use_colors=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
