"""
Boundaries to the host client's screen.

Rendering belongs to the host; the relay only produces lines and asks for the
captcha prompt to be shown. ``BufferedDisplay`` and ``BufferedCaptchaPrompt``
record what they are given, for headless use and tests.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

CHAT_FORMAT = "[DC] {sender}: {message}"
NOTICE_PREFIX = "[DirectChat] "
WARNING_PREFIX = "⚠ [DirectChat] "

# Returns the local player's id while they are in a world, else None
PlayerPresence = Callable[[], str | None]


class ChatDisplay(Protocol):
    """Where relayed chat and local-only notices end up."""

    def show_chat(self, sender: str, message: str, timestamp: int) -> None: ...

    def notice(self, text: str) -> None: ...

    def warning(self, text: str) -> None: ...

    def echo(self, text: str) -> None: ...


class CaptchaPrompt(Protocol):
    """Host screen that shows a challenge and collects the answer."""

    def open(self, challenge: str | None, player_id: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def close(self) -> None: ...


@dataclass
class BufferedDisplay:
    lines: list[str] = field(default_factory=list)

    def show_chat(self, sender: str, message: str, timestamp: int) -> None:
        self.lines.append(CHAT_FORMAT.format(sender=sender, message=message))

    def notice(self, text: str) -> None:
        self.lines.append(NOTICE_PREFIX + text)

    def warning(self, text: str) -> None:
        self.lines.append(WARNING_PREFIX + text)

    def echo(self, text: str) -> None:
        self.lines.append(text)

    def chat_lines(self) -> list[str]:
        return [line for line in self.lines if line.startswith("[DC] ")]


@dataclass
class BufferedCaptchaPrompt:
    challenge: str | None = None
    player_id: str | None = None
    is_open: bool = False
    errors: list[str] = field(default_factory=list)

    def open(self, challenge: str | None, player_id: str) -> None:
        self.challenge = challenge
        self.player_id = player_id
        self.is_open = True

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def close(self) -> None:
        self.is_open = False
