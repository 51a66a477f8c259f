"""Chat history, broadcast and native-chat guarding."""

from .broadcast import Broadcaster
from .chat_message import ChatMessage
from .guard import ChatGuard
from .history import HistoryManager

__all__ = ["Broadcaster", "ChatGuard", "ChatMessage", "HistoryManager"]
