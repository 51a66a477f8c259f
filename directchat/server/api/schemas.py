"""
Wire models for the relay HTTP API.

Request models are lenient (missing fields are None) so the handler can
answer with a protocol ERROR instead of a framework validation error.
Responses are dumped with ``exclude_none`` to keep optional fields off the
wire.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...error_types import ResponseStatus


class AuthRequest(BaseModel):
    """Body of ``POST /api/auth``."""

    model_config = ConfigDict(extra="ignore")

    uuid: str | None = None
    password: str | None = None
    captcha_response: str | None = None


class SendRequest(BaseModel):
    """Body of ``POST /api/send``."""

    model_config = ConfigDict(extra="ignore")

    message: str | None = None


class WireMessage(BaseModel):
    """One chat line in a fetch response."""

    sender: str
    message: str
    timestamp: int


class RelayResponse(BaseModel):
    """Fields shared by every response."""

    status: ResponseStatus
    message: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class AuthResponse(RelayResponse):
    token: str | None = None
    captcha_image: str | None = None
    player_name: str | None = None


class FetchResponse(RelayResponse):
    messages: list[WireMessage] | None = None


class HealthResponse(BaseModel):
    status: ResponseStatus = ResponseStatus.OK
    plugin: str = "DirectChat"
    version: str
    authenticated_players: int = Field(default=0, ge=0)
    history_size: int = Field(default=0, ge=0)
