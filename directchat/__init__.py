"""DirectChat: relay game chat through an authenticated HTTP channel."""

__version__ = "1.0.0"
