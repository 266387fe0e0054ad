"""Inbound browser messages and their parser."""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, ValidationError

from scenelink.scene_server.errors import MalformedMessageError
from scenelink.scene_server.models.commands import WireModel


class RegisterSession(WireModel):
    """First message on every browser connection."""

    type: Literal["registerSession"]
    session_id: str = Field(min_length=1)


class StateResponse(WireModel):
    type: Literal["stateResponse"]
    request_id: str
    state: dict[str, Any]


class StateError(WireModel):
    type: Literal["stateError"]
    request_id: str
    error: str = "Unknown browser error"


class StateUpdate(WireModel):
    """Unsolicited push sent after every locally applied command."""

    type: Literal["stateUpdate"]
    state: dict[str, Any]
    timestamp: float | None = None
    """Epoch milliseconds of the browser's capture, if reported."""


InboundMessage = Annotated[
    RegisterSession | StateResponse | StateError | StateUpdate,
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(raw: str | bytes) -> RegisterSession | StateResponse | StateError | StateUpdate:
    """Decode one WebSocket frame.

    Raises ``MalformedMessageError`` for invalid JSON, non-object payloads,
    unknown ``type`` tags and missing or mistyped fields.
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as exc:
        msg = f"invalid JSON: {exc}"
        raise MalformedMessageError(msg) from exc

    if not isinstance(data, dict):
        msg = f"expected a JSON object, got {type(data).__name__}"
        raise MalformedMessageError(msg)

    try:
        return _inbound_adapter.validate_python(data)
    except ValidationError as exc:
        msg = f"invalid '{data.get('type')}' message: {exc.error_count()} validation error(s)"
        raise MalformedMessageError(msg) from exc
