"""
The client's single execution context for state and display mutation.

Network calls run as separate tasks; whatever their completions do to session
state or to the screen is handed to ``MainContext.dispatch`` and runs later
as a plain callback on the owning event loop, one at a time and in
submission order.
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger("client.main_context")


class MainContext:
    """Serializes callbacks onto one asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    @classmethod
    def current(cls) -> "MainContext":
        """Bind to the running loop (must be called from inside it)."""
        return cls(asyncio.get_running_loop())

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> asyncio.Future:
        """
        Schedule ``callback(*args)`` on the main loop.

        Returns:
            A future resolved with the callback's return value, or with None
            when the callback failed (the failure is logged)
        """
        future: asyncio.Future = self.loop.create_future()

        def run() -> None:
            result = None
            try:
                result = callback(*args)
            except Exception as error:  # pylint: disable=broad-exception-caught
                logger.error(
                    "Main-context callback failed",
                    callback=getattr(callback, "__name__", repr(callback)),
                    exc_info=error,
                )
            if not future.done():
                future.set_result(result)

        self.loop.call_soon_threadsafe(run)
        return future

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Start a coroutine as a task on the main loop without waiting for it."""
        return self.loop.create_task(coro)
