"""
Background polling of the relay's chat history.

One scheduling task ticks at a fixed interval. A tick never waits on the
network: it spawns a fetch task and returns. Each successful fetch advances
the cursor to the newest timestamp it contained and forwards the messages to
the display through the main context. Failed fetches are dropped; the next
tick simply tries again.
"""

import asyncio
import time
from collections.abc import Callable

from ..structured_logging.enhanced_logging_config import get_logger
from .display import ChatDisplay
from .main_context import MainContext
from .relay_client import RelayClient, RelayedMessage

logger = get_logger("client.poller")

POLL_INTERVAL_SECONDS = 1.0


def current_millis() -> int:
    return int(time.time() * 1000)


class Poller:
    """Fixed-interval fetch loop with a monotonic timestamp cursor."""

    def __init__(
        self,
        relay: RelayClient,
        display: ChatDisplay,
        context: MainContext,
        is_active: Callable[[], bool],
        interval: float = POLL_INTERVAL_SECONDS,
        clock_ms: Callable[[], int] = current_millis,
    ) -> None:
        """
        Args:
            relay: Client used for fetches
            display: Sink for received chat lines
            context: Main context that owns cursor and display updates
            is_active: Checked every tick; polling only happens while it is True
            interval: Seconds between ticks
            clock_ms: Source of the current time in milliseconds
        """
        self.relay = relay
        self.display = display
        self.context = context
        self.is_active = is_active
        self.interval = interval
        self._clock_ms = clock_ms
        self.cursor = 0
        self._schedule: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._schedule is not None and not self._schedule.done()

    @property
    def in_flight(self) -> set[asyncio.Task]:
        return set(self._in_flight)

    def start(self) -> None:
        """Begin ticking; does nothing if already running."""
        if self.running:
            return
        self.cursor = self._clock_ms()
        self._schedule = self.context.spawn(self._run())
        logger.info("Message poller started", interval=self.interval)

    def stop(self) -> None:
        """
        Stop future ticks.

        A fetch already in flight is left alone and still applies its results
        when it completes.
        """
        if self._schedule is not None:
            self._schedule.cancel()
            self._schedule = None
            logger.info("Message poller stopped")

    def shutdown(self) -> None:
        """Stop ticking and abandon any fetch still in flight."""
        self.stop()
        for task in list(self._in_flight):
            task.cancel()

    def reset_timestamp(self) -> None:
        """Skip history older than now, e.g. when a new session starts."""
        self.cursor = self._clock_ms()

    async def _run(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self.interval)

    def tick(self) -> asyncio.Task | None:
        """
        Run one scheduling step.

        Returns:
            The spawned fetch task, or None when polling is currently inactive
        """
        if not self.is_active():
            return None
        task = self.context.spawn(self._poll_once(self.cursor))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _poll_once(self, since: int) -> None:
        result = await self.relay.fetch(since)
        if not result.ok:
            logger.debug("Poll failed, waiting for next tick", since=since)
            return
        if result.messages:
            await self.context.dispatch(self.apply, result.messages)

    def apply(self, messages: list[RelayedMessage]) -> None:
        """
        Advance the cursor over a fetched batch and display it.

        Messages at or below the cursor held before this batch were already
        shown by an earlier, overlapping fetch and are skipped.
        """
        floor = self.cursor
        for message in messages:
            if message.timestamp <= floor:
                continue
            self.cursor = max(self.cursor, message.timestamp)
            self.display.show_chat(message.sender, message.message, message.timestamp)
