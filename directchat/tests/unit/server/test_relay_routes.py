"""
End-to-end tests of the relay HTTP surface through FastAPI's TestClient.
"""

import uuid

from fastapi.testclient import TestClient

from directchat import __version__
from directchat.server.app.factory import create_app
from directchat.server.api.routes import parse_since

TEST_PASSWORD = "test-relay-password"


def login(client, player_id) -> str:
    response = client.post("/api/auth", json={"uuid": player_id, "password": TEST_PASSWORD})
    assert response.status_code == 200
    return response.json()["token"]


class TestAuthRoute:
    def test_auth_success(self, client, player_id):
        response = client.post("/api/auth", json={"uuid": player_id, "password": TEST_PASSWORD})

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "OK"
        assert len(body["token"]) == 16
        assert body["player_name"] == "Steve"
        assert "captcha_image" not in body

    def test_auth_wrong_password_is_http_200(self, client, player_id):
        response = client.post("/api/auth", json={"uuid": player_id, "password": "nope"})

        assert response.status_code == 200
        assert response.json() == {"status": "ERROR", "message": "Invalid password"}

    def test_auth_malformed_body(self, client):
        response = client.post("/api/auth", content=b"not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 200
        assert response.json() == {"status": "ERROR", "message": "Malformed request"}

    def test_auth_wrong_method(self, client):
        response = client.get("/api/auth")

        assert response.status_code == 405
        assert response.json() == {"status": "ERROR", "message": "Method not allowed"}


class TestBearerRoutes:
    def test_fetch_without_header(self, client):
        response = client.get("/api/fetch")

        assert response.status_code == 401
        assert response.json() == {"status": "ERROR", "message": "Missing or invalid authorization"}

    def test_fetch_with_non_bearer_header(self, client):
        response = client.get("/api/fetch", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_fetch_after_login_is_empty(self, client, player_id):
        token = login(client, player_id)

        response = client.get("/api/fetch", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"status": "OK", "messages": []}

    def test_send_then_fetch(self, client, player_id, game):
        token = login(client, player_id)
        headers = {"Authorization": f"Bearer {token}"}

        sent = client.post("/api/send", json={"message": "Hello"}, headers=headers)
        assert sent.json() == {"status": "OK"}

        messages = client.get("/api/fetch", headers=headers).json()["messages"]
        assert [(m["sender"], m["message"]) for m in messages] == [("Steve", "Hello")]
        assert game.delivered[player_id] == ["[DC] Steve: Hello"]

        cursor = messages[-1]["timestamp"]
        newer = client.get("/api/fetch", params={"since": cursor}, headers=headers).json()
        assert newer == {"status": "OK", "messages": []}

    def test_non_numeric_since_means_everything(self, client, player_id):
        token = login(client, player_id)
        headers = {"Authorization": f"Bearer {token}"}
        client.post("/api/send", json={"message": "Hello"}, headers=headers)

        response = client.get("/api/fetch?since=yesterday", headers=headers)

        assert len(response.json()["messages"]) == 1

    def test_send_with_unknown_token(self, client):
        response = client.post("/api/send", json={"message": "hi"}, headers={"Authorization": "Bearer unknown"})

        assert response.status_code == 200
        assert response.json() == {"status": "ERROR", "message": "Invalid or expired token"}

    def test_send_checks_token_before_body(self, client):
        response = client.post(
            "/api/send",
            content=b"{not json",
            headers={"Authorization": "Bearer unknown", "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"status": "ERROR", "message": "Invalid or expired token"}

    def test_send_malformed_body_with_valid_token(self, client, player_id):
        token = login(client, player_id)

        response = client.post(
            "/api/send",
            content=b"{not json",
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )

        assert response.json() == {"status": "ERROR", "message": "Malformed request"}

    def test_send_wrong_method(self, client):
        assert client.get("/api/send").status_code == 405

    def test_offline_player_cannot_auth(self, client):
        response = client.post("/api/auth", json={"uuid": str(uuid.uuid4()), "password": TEST_PASSWORD})
        assert response.json()["message"] == "Player not online"


class TestHealthRoute:
    def test_health(self, client):
        body = client.get("/api/health").json()

        assert body["status"] == "OK"
        assert body["plugin"] == "DirectChat"
        assert body["version"] == __version__

    def test_correlation_header_echoed(self, client):
        response = client.get("/api/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestParseSince:
    def test_values(self):
        assert parse_since(None) == 0
        assert parse_since("1500") == 1500
        assert parse_since("abc") == 0


class TestShutdown:
    def test_tokens_dropped_on_shutdown(self, container, player_id):
        token = container.tokens.issue(player_id)
        container.shutdown()
        assert container.tokens.resolve(token) is None


class TestUnhandledErrors:
    """Faults that escape a route still answer in the relay's own envelope."""

    def test_fault_becomes_internal_error(self, container):
        app = create_app(container=container)

        @app.get("/api/explode")
        async def explode():
            raise RuntimeError("database password is hunter2")

        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/api/explode")

        assert response.status_code == 200
        assert response.json() == {"status": "ERROR", "message": "Internal error"}
        assert "hunter2" not in response.text
