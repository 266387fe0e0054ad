"""Outbound messages: scene commands and server notices.

Field names are the wire contract; Python attributes are snake_case and
serialise to camelCase through the shared alias generator.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scenelink.scene_server.models.enums import CommandType


class WireModel(BaseModel):
    """Base for every JSON object exchanged with the browser."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- Commands ----------------------------------------------------------------


class Command(WireModel):
    """Parameterless scene command, e.g. ``swingKeyLightUp{}``."""

    type: CommandType


class ColorCommand(Command):
    color: str
    """Normalised ``#rrggbb`` hex string."""


class SizeCommand(Command):
    type: CommandType = CommandType.CHANGE_SIZE
    size: float = Field(gt=0)


class ScaleCommand(Command):
    type: CommandType = CommandType.SCALE_MODEL
    x: float = Field(gt=0)
    y: float = Field(gt=0)
    z: float = Field(gt=0)


class IntensityCommand(Command):
    intensity: float = Field(ge=0)


# -- Server notices ----------------------------------------------------------


class SessionRegistered(WireModel):
    type: Literal["sessionRegistered"] = "sessionRegistered"
    session_id: str


class ErrorNotice(WireModel):
    type: Literal["error"] = "error"
    message: str


class RequestState(WireModel):
    type: Literal["requestState"] = "requestState"
    request_id: str
    force_refresh: bool = False


class ToolCallNotice(WireModel):
    type: Literal["toolCall"] = "toolCall"
    tool_name: str
    timestamp: int
    """Epoch milliseconds."""
