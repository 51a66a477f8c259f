"""
Tests for the relay token manager.
"""

import threading

from directchat.server.auth.token_manager import TOKEN_ALPHABET, TOKEN_LENGTH, TokenManager, generate_token_value


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenGeneration:
    """Test token value shape."""

    def test_token_is_sixteen_alphanumeric_characters(self):
        token = generate_token_value()
        assert len(token) == TOKEN_LENGTH
        assert all(ch in TOKEN_ALPHABET for ch in token)

    def test_tokens_are_not_repeated(self):
        assert len({generate_token_value() for _ in range(200)}) == 200


class TestTokenLifecycle:
    """Test issue, resolve and revoke."""

    def test_issue_and_resolve(self):
        manager = TokenManager()
        token = manager.issue("player-1")

        assert manager.resolve(token) == "player-1"
        assert manager.is_authenticated("player-1")

    def test_unknown_token_resolves_to_none(self):
        assert TokenManager().resolve("nope") is None

    def test_second_issue_invalidates_first(self):
        manager = TokenManager()
        first = manager.issue("player-1")
        second = manager.issue("player-1")

        assert first != second
        assert manager.resolve(first) is None
        assert manager.resolve(second) == "player-1"
        assert manager.authenticated_players() == {"player-1"}

    def test_revoke_is_idempotent(self):
        manager = TokenManager()
        token = manager.issue("player-1")

        manager.revoke(token)
        manager.revoke(token)
        manager.revoke("never-issued")

        assert manager.resolve(token) is None
        assert not manager.is_authenticated("player-1")

    def test_revoke_for_player(self):
        manager = TokenManager()
        token = manager.issue("player-1")
        manager.issue("player-2")

        manager.revoke_for_player("player-1")
        manager.revoke_for_player("player-1")

        assert manager.resolve(token) is None
        assert manager.authenticated_players() == {"player-2"}

    def test_revoke_all(self):
        manager = TokenManager()
        tokens = [manager.issue(f"player-{i}") for i in range(5)]

        manager.revoke_all()

        assert all(manager.resolve(token) is None for token in tokens)
        assert manager.authenticated_players() == set()


class TestTokenExpiry:
    """Test lazy expiry with an injected clock."""

    def test_token_valid_until_expiry(self):
        clock = FakeClock()
        manager = TokenManager(token_expiry_seconds=60, clock=clock)
        token = manager.issue("player-1")

        clock.now += 60
        assert manager.resolve(token) == "player-1"

        clock.now += 0.001
        assert manager.resolve(token) is None
        assert not manager.is_authenticated("player-1")
        assert manager.authenticated_players() == set()

    def test_is_authenticated_purges_expired_token(self):
        clock = FakeClock()
        manager = TokenManager(token_expiry_seconds=10, clock=clock)
        token = manager.issue("player-1")

        clock.now += 11
        assert not manager.is_authenticated("player-1")
        assert manager.resolve(token) is None

    def test_non_positive_expiry_never_expires(self):
        clock = FakeClock()
        manager = TokenManager(token_expiry_seconds=0, clock=clock)
        token = manager.issue("player-1")

        clock.now += 10**9
        assert manager.resolve(token) == "player-1"


class TestTokenConcurrency:
    """Concurrent issue for one player leaves exactly one live token."""

    def test_concurrent_issue_single_survivor(self):
        manager = TokenManager()
        issued: list[str] = []
        lock = threading.Lock()

        def worker():
            for _ in range(50):
                token = manager.issue("player-1")
                with lock:
                    issued.append(token)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        live = [token for token in issued if manager.resolve(token) is not None]
        assert len(live) == 1
        assert manager.authenticated_players() == {"player-1"}
