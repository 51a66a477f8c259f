"""
Tests for the async relay client using httpx.MockTransport.
"""

import json

import httpx
import pytest

from directchat.client.relay_client import AuthFailed, AuthOk, CaptchaRequired, RelayClient
from directchat.client.settings import ClientSettings

BASE_URL = "http://relay.test"


def make_client(handler, **settings_overrides) -> tuple[RelayClient, ClientSettings]:
    settings = ClientSettings(current_url=BASE_URL, password="pw", auth_token="tok123", **settings_overrides)
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RelayClient(settings, http_client=http), settings


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "OK", "token": "abcdEFGH12345678", "player_name": "Steve"})

        client, _ = make_client(handler)
        result = await client.authenticate(BASE_URL, "pw", "player-1")

        assert result == AuthOk("abcdEFGH12345678", "Steve")
        assert seen["url"] == f"{BASE_URL}/api/auth"
        assert seen["body"] == {"uuid": "player-1", "password": "pw"}

    @pytest.mark.asyncio
    async def test_captcha_required(self):
        def handler(request):
            return httpx.Response(200, json={"status": "CAPTCHA_REQUIRED", "captcha_image": "What is 1 + 1?"})

        client, _ = make_client(handler)
        assert await client.authenticate(BASE_URL, "pw", "player-1") == CaptchaRequired("What is 1 + 1?")

    @pytest.mark.asyncio
    async def test_error_message_passed_through(self):
        def handler(request):
            return httpx.Response(200, json={"status": "ERROR", "message": "Invalid password"})

        client, _ = make_client(handler)
        assert await client.authenticate(BASE_URL, "pw", "player-1") == AuthFailed("Invalid password")

    @pytest.mark.asyncio
    async def test_submit_captcha_uses_stored_url_and_password(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "OK", "token": "t"})

        client, _ = make_client(handler)
        result = await client.submit_captcha("2", "player-1")

        assert isinstance(result, AuthOk)
        assert seen["url"] == f"{BASE_URL}/api/auth"
        assert seen["body"] == {"uuid": "player-1", "password": "pw", "captcha_response": "2"}

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(handler)
        result = await client.authenticate(BASE_URL, "pw", "player-1")

        assert isinstance(result, AuthFailed)
        assert "Connection failed" in result.message


class TestSend:
    @pytest.mark.asyncio
    async def test_send_uses_bearer_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "OK"})

        client, _ = make_client(handler)

        assert await client.send("hello") is True
        assert seen == {"auth": "Bearer tok123", "body": {"message": "hello"}}

    @pytest.mark.asyncio
    async def test_send_error_status_is_false(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={"status": "ERROR", "message": "x"}))
        assert await client.send("hello") is False

    @pytest.mark.asyncio
    async def test_send_without_token(self):
        client, settings = make_client(lambda request: httpx.Response(200, json={"status": "OK"}))
        settings.auth_token = None
        assert await client.send("hello") is False

    @pytest.mark.asyncio
    async def test_send_timeout_is_false(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client, _ = make_client(handler)
        assert await client.send("hello") is False


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_parses_messages_and_since(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={"status": "OK", "messages": [{"sender": "Alex", "message": "hi", "timestamp": 1700}]},
            )

        client, _ = make_client(handler)
        result = await client.fetch(1500)

        assert result.ok
        assert [(m.sender, m.message, m.timestamp) for m in result.messages] == [("Alex", "hi", 1700)]
        assert seen["params"] == {"since": "1500"}

    @pytest.mark.asyncio
    async def test_fetch_zero_omits_since(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"status": "OK", "messages": []})

        client, _ = make_client(handler)
        result = await client.fetch(0)

        assert result.ok and result.messages == []
        assert seen["params"] == {}

    @pytest.mark.asyncio
    async def test_fetch_non_json_is_failure(self):
        client, _ = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        result = await client.fetch(10)

        assert not result.ok

    @pytest.mark.asyncio
    async def test_fetch_error_status_is_failure(self):
        client, _ = make_client(
            lambda request: httpx.Response(401, json={"status": "ERROR", "message": "Missing or invalid authorization"})
        )
        assert not (await client.fetch(10)).ok

    @pytest.mark.asyncio
    async def test_fetch_bad_message_shape_is_failure(self):
        client, _ = make_client(
            lambda request: httpx.Response(200, json={"status": "OK", "messages": [{"timestamp": "soon"}]})
        )
        assert not (await client.fetch(10)).ok

    @pytest.mark.asyncio
    async def test_fetch_timeout_is_failure(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        client, _ = make_client(handler)
        assert not (await client.fetch(10)).ok
