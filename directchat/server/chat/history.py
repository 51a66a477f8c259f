"""
Bounded chat history serving catch-up fetches.

Clients poll with the newest timestamp they have seen and receive everything
strictly newer. Timestamps are milliseconds and strictly increasing, so two
messages appended within the same millisecond are still told apart by the
cursor.
"""

import threading
import time
from collections import deque
from collections.abc import Callable

from ...structured_logging.enhanced_logging_config import get_logger
from .chat_message import ChatMessage

logger = get_logger("communications.history")


def current_millis() -> int:
    return int(time.time() * 1000)


class HistoryManager:
    """Fixed-capacity FIFO of chat messages in timestamp order."""

    def __init__(self, max_size: int = 100, clock_ms: Callable[[], int] = current_millis) -> None:
        """
        Args:
            max_size: Maximum number of messages kept; older ones are evicted
            clock_ms: Source of the current time in milliseconds
        """
        if max_size < 1:
            raise ValueError("History size must be at least 1")
        self.max_size = max_size
        self._clock_ms = clock_ms
        self._messages: deque[ChatMessage] = deque()
        self._last_timestamp = 0
        self._lock = threading.Lock()

    def append(self, sender_id: str, sender_name: str, text: str) -> ChatMessage:
        """
        Store a message and return the stored record.

        Args:
            sender_id: Sending player's id
            sender_name: Sending player's display name
            text: Message text (already sanitized)

        Returns:
            The stored ChatMessage
        """
        with self._lock:
            timestamp = max(self._clock_ms(), self._last_timestamp + 1)
            message = ChatMessage(sender_id, sender_name, text, timestamp)
            self._messages.append(message)
            self._last_timestamp = timestamp
            while len(self._messages) > self.max_size:
                self._messages.popleft()
        return message

    def since(self, timestamp: int) -> list[ChatMessage]:
        """All stored messages with a timestamp strictly greater than ``timestamp``, oldest first."""
        with self._lock:
            return [message for message in self._messages if message.timestamp > timestamp]

    def all_messages(self) -> list[ChatMessage]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()
        logger.info("Chat history cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
