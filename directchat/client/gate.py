"""
Per-line routing between the relay and the game's native chat.

The gate answers synchronously (PASS lets the native path handle the line,
BLOCK suppresses it) and, when it relays, returns the send task so callers
can observe completion. Once a line is relayed the native path is never used
for it, whatever the send's outcome.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

from ..structured_logging.enhanced_logging_config import get_logger
from .display import ChatDisplay
from .main_context import MainContext
from .relay_client import RelayClient
from .session import ClientSession

logger = get_logger("client.gate")

CONTROL_COMMAND = "directchat"
COMMAND_MARKER = "/"

NOT_CONNECTED_NOTICE = "Not connected! Use /directchat connect <url> <password>"
SEND_FAILED_NOTICE = "Failed to send message!"
COMMAND_FAILED_NOTICE = "Failed to send command!"
LOCAL_ECHO_FORMAT = "[You] {message}"


class GateDecision(Enum):
    PASS = "pass"
    BLOCK = "block"


@dataclass(frozen=True)
class GateResult:
    decision: GateDecision
    task: asyncio.Task | None = None

    @property
    def passes(self) -> bool:
        return self.decision is GateDecision.PASS


class Gate:
    """Decides whether outgoing chat and commands go through the relay."""

    def __init__(self, session: ClientSession, relay: RelayClient, display: ChatDisplay, context: MainContext) -> None:
        self.session = session
        self.relay = relay
        self.display = display
        self.context = context

    def on_chat(self, message: str) -> GateResult:
        """Route an outgoing chat line."""
        if not self.session.relay_enabled:
            return GateResult(GateDecision.PASS)

        if not self.session.is_connected:
            self.display.notice(NOT_CONNECTED_NOTICE)
            return GateResult(GateDecision.BLOCK)

        task = self.context.spawn(self._send_chat(message))
        return GateResult(GateDecision.BLOCK, task)

    def on_command(self, command: str) -> GateResult:
        """
        Route an outgoing command.

        Args:
            command: Command line without its leading slash
        """
        if command.split(" ", 1)[0].lower() == CONTROL_COMMAND:
            return GateResult(GateDecision.PASS)

        if self.session.relay_enabled and self.session.is_connected:
            task = self.context.spawn(self._send_command(COMMAND_MARKER + command))
            return GateResult(GateDecision.BLOCK, task)

        return GateResult(GateDecision.PASS)

    async def _send_chat(self, message: str) -> bool:
        success = await self.relay.send(message)
        if success:
            await self.context.dispatch(self._echo, message)
        else:
            await self.context.dispatch(self.display.notice, SEND_FAILED_NOTICE)
        return success

    async def _send_command(self, command_line: str) -> bool:
        success = await self.relay.send(command_line)
        if not success:
            await self.context.dispatch(self.display.notice, COMMAND_FAILED_NOTICE)
        logger.debug("Relayed command", success=success)
        return success

    def _echo(self, message: str) -> None:
        self.display.echo(LOCAL_ECHO_FORMAT.format(message=message))
