"""
Tests for the bounded chat history.
"""

import pytest

from directchat.server.chat.history import HistoryManager


class SteppingClock:
    """Millisecond clock returning queued values, then repeating the last."""

    def __init__(self, *values: int) -> None:
        self.values = list(values)

    def __call__(self) -> int:
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


class TestHistoryManager:
    """Test append, since and eviction."""

    def test_since_returns_strictly_newer_in_order(self):
        history = HistoryManager(clock_ms=SteppingClock(100, 200, 300))
        history.append("p1", "Steve", "one")
        history.append("p1", "Steve", "two")
        history.append("p2", "Alex", "three")

        newer = history.since(100)

        assert [message.text for message in newer] == ["two", "three"]
        assert [message.timestamp for message in newer] == [200, 300]

    def test_since_zero_returns_everything(self):
        history = HistoryManager()
        history.append("p1", "Steve", "hello")
        assert len(history.since(0)) == 1

    def test_since_latest_returns_nothing(self):
        history = HistoryManager()
        last = history.append("p1", "Steve", "hello")
        assert history.since(last.timestamp) == []

    def test_capacity_evicts_oldest(self):
        history = HistoryManager(max_size=3)
        for i in range(5):
            history.append("p1", "Steve", f"m{i}")

        assert len(history) == 3
        assert [message.text for message in history.all_messages()] == ["m2", "m3", "m4"]

    def test_timestamps_strictly_increase_within_one_millisecond(self):
        history = HistoryManager(clock_ms=SteppingClock(5_000))
        stamps = [history.append("p1", "Steve", str(i)).timestamp for i in range(4)]

        assert stamps == [5_000, 5_001, 5_002, 5_003]

    def test_timestamps_do_not_go_backwards_with_clock(self):
        history = HistoryManager(clock_ms=SteppingClock(1_000, 900))
        first = history.append("p1", "Steve", "a")
        second = history.append("p1", "Steve", "b")

        assert second.timestamp > first.timestamp

    def test_clear(self):
        history = HistoryManager()
        history.append("p1", "Steve", "hello")
        history.clear()
        assert len(history) == 0

    def test_size_must_be_positive(self):
        with pytest.raises(ValueError):
            HistoryManager(max_size=0)

    def test_wire_shape(self):
        history = HistoryManager(clock_ms=SteppingClock(42))
        message = history.append("p1", "Steve", "hello")

        assert message.to_wire() == {"sender": "Steve", "message": "hello", "timestamp": 42}
