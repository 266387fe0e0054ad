"""Wire models for the browser WebSocket protocol."""

from scenelink.scene_server.models.commands import (
    ColorCommand,
    Command,
    ErrorNotice,
    IntensityCommand,
    RequestState,
    ScaleCommand,
    SessionRegistered,
    SizeCommand,
    ToolCallNotice,
    WireModel,
)
from scenelink.scene_server.models.enums import CommandType
from scenelink.scene_server.models.messages import (
    InboundMessage,
    RegisterSession,
    StateError,
    StateResponse,
    StateUpdate,
    parse_inbound,
)

__all__ = [
    # Commands
    "ColorCommand",
    "Command",
    # Enums
    "CommandType",
    # Notices
    "ErrorNotice",
    # Inbound
    "InboundMessage",
    "IntensityCommand",
    "RegisterSession",
    "RequestState",
    "ScaleCommand",
    "SessionRegistered",
    "SizeCommand",
    "StateError",
    "StateResponse",
    "StateUpdate",
    "ToolCallNotice",
    "WireModel",
    "parse_inbound",
]
