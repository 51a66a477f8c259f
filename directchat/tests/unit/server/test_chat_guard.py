"""
Tests for the native chat guard and the broadcaster.
"""

import pytest

from directchat.server.chat.guard import ACCESS_DENIED_MESSAGE, BYPASS_PERMISSION, ChatGuard


@pytest.fixture
def guard(container) -> ChatGuard:
    return container.guard


class TestChatGuard:
    """Test who may use native chat and commands."""

    def test_unauthenticated_chat_blocked(self, guard, game, player_id):
        assert guard.allow_chat(player_id) is False
        assert game.delivered[player_id] == [ACCESS_DENIED_MESSAGE]

    def test_authenticated_chat_allowed(self, guard, container, game, player_id):
        container.tokens.issue(player_id)

        assert guard.allow_chat(player_id) is True
        assert player_id not in game.delivered

    def test_bypass_permission(self, guard, game):
        game.join("admin-id", "Admin", permissions={BYPASS_PERMISSION})

        assert guard.allow_chat("admin-id")
        assert guard.allow_command("admin-id", "/gamemode creative")

    @pytest.mark.parametrize("command_line", ["/directchat", "/directchat connect http://x pw", "/DirectChat status"])
    def test_control_command_always_allowed(self, guard, player_id, command_line):
        assert guard.allow_command(player_id, command_line)

    def test_other_commands_blocked_without_token(self, guard, game, player_id):
        assert not guard.allow_command(player_id, "/spawn")
        assert game.delivered[player_id] == [ACCESS_DENIED_MESSAGE]

    def test_quit_revokes_token(self, guard, container, player_id):
        token = container.tokens.issue(player_id)

        guard.on_player_quit(player_id)

        assert container.tokens.resolve(token) is None
        assert not guard.allow_chat(player_id)


class TestBroadcaster:
    """Test delivery to authenticated, online players."""

    def test_only_authenticated_online_players_receive(self, container, game, player_id):
        container.tokens.issue(player_id)
        game.join("offline-holder", "Ghost")
        container.tokens.issue("offline-holder")
        game.leave("offline-holder")
        game.join("guest", "Guest")

        message = container.broadcaster.broadcast_message(player_id, "Steve", "hi all")

        assert message.text == "hi all"
        assert game.delivered[player_id] == ["[DC] Steve: hi all"]
        assert "offline-holder" not in game.delivered
        assert "guest" not in game.delivered

    def test_system_broadcast_not_stored(self, container, game, player_id):
        container.tokens.issue(player_id)

        delivered = container.broadcaster.broadcast_system("Server restarting")

        assert delivered == 1
        assert game.delivered[player_id] == ["[DC System] Server restarting"]
        assert len(container.history) == 0
