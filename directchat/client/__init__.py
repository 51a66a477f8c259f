"""Client side of the relay: HTTP client, poller, gate and control commands."""

from .commands import ControlCommands, normalize_url
from .display import BufferedCaptchaPrompt, BufferedDisplay, CaptchaPrompt, ChatDisplay
from .gate import Gate, GateDecision, GateResult
from .main_context import MainContext
from .poller import Poller
from .relay_client import AuthFailed, AuthOk, CaptchaRequired, FetchResult, RelayClient, RelayedMessage
from .session import ClientSession, SessionState
from .settings import ClientSettings, MemorySettingsStore, SettingsStore

__all__ = [
    "AuthFailed",
    "AuthOk",
    "BufferedCaptchaPrompt",
    "BufferedDisplay",
    "CaptchaPrompt",
    "CaptchaRequired",
    "ChatDisplay",
    "ClientSession",
    "ClientSettings",
    "ControlCommands",
    "FetchResult",
    "Gate",
    "GateDecision",
    "GateResult",
    "MainContext",
    "MemorySettingsStore",
    "Poller",
    "RelayClient",
    "RelayedMessage",
    "SessionState",
    "SettingsStore",
    "normalize_url",
]
