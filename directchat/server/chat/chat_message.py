"""Chat message record stored in the relay history."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A broadcast chat line with its server-assigned millisecond timestamp."""

    sender_id: str
    sender_name: str
    text: str
    timestamp: int

    def to_wire(self) -> dict[str, Any]:
        """Shape used in fetch responses."""
        return {"sender": self.sender_name, "message": self.text, "timestamp": self.timestamp}
