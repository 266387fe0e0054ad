"""MCP tool handlers for the 3D scene.

Handlers are registered once and serve every session: they find out which
session they act for through ``current_session()``, bound by ``SceneMCP``
around each call.  Scene-mutating tools send one command and return a
confirmation without waiting for the browser.  Query tools read one field
of the scene state.

Failures surface as ``ToolError`` so the client sees an ``isError`` result
with a readable message.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any

from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from scenelink.scene_server.colors import COLOR_NAMES, describe_color, normalize_color
from scenelink.scene_server.context import current_session
from scenelink.scene_server.errors import NoSessionError, SceneError
from scenelink.scene_server.models.commands import (
    ColorCommand,
    Command,
    IntensityCommand,
    ScaleCommand,
    SizeCommand,
)
from scenelink.scene_server.models.enums import CommandType

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from scenelink.scene_server.bridge import SceneBridge

ColorArg = Annotated[
    str,
    Field(
        description=(
            'Hex color code (e.g., "#ff0000") or Apple crayon color name '
            f'(e.g., "maraschino", "turquoise", "lemon"). Available colors: {COLOR_NAMES}'
        )
    ),
]
PositiveFloat = Annotated[float, Field(gt=0)]
IntensityArg = Annotated[float, Field(ge=0, description="Light intensity value (0.0 or higher)")]
ForceRefreshArg = Annotated[
    bool,
    Field(description="Ask the browser for a fresh snapshot instead of using the last known state."),
]

NO_VIEWER_NOTE = (
    "Note: no browser is connected to this session, so nothing changed on screen. "
    "Use get_browser_connection_url to open the 3D viewer."
)


@dataclass(frozen=True)
class ToolSpec:
    """One row of the static tool table."""

    name: str
    title: str
    description: str
    handler: Callable[..., Awaitable[str]]


class SceneTools:
    """Tool handlers bound to one ``SceneBridge``."""

    def __init__(self, bridge: SceneBridge, *, browser_url: str) -> None:
        self._bridge = bridge
        self._browser_url = browser_url

    # -- Model -----------------------------------------------------------------

    async def change_model_color(self, color: ColorArg) -> str:
        return await self._send_color(CommandType.CHANGE_COLOR, color, "Model color", example="#ff0000")

    async def change_model_size(
        self,
        size: Annotated[float, Field(gt=0, description="New size value (uniform scaling)")],
    ) -> str:
        return await self._send(SizeCommand(size=size), f"Model size changed to {size:g}")

    async def scale_model(
        self,
        x: Annotated[PositiveFloat, Field(description="Scale factor for X axis")],
        y: Annotated[PositiveFloat, Field(description="Scale factor for Y axis")],
        z: Annotated[PositiveFloat, Field(description="Scale factor for Z axis")],
    ) -> str:
        return await self._send(ScaleCommand(x=x, y=y, z=z), f"Model scaled to ({x:g}, {y:g}, {z:g})")

    async def change_background_color(self, color: ColorArg) -> str:
        return await self._send_color(
            CommandType.CHANGE_BACKGROUND_COLOR, color, "Background color", example="#000000"
        )

    # -- Lights ----------------------------------------------------------------

    async def set_key_light_intensity(self, intensity: IntensityArg) -> str:
        command = IntensityCommand(type=CommandType.SET_KEY_LIGHT_INTENSITY, intensity=intensity)
        return await self._send(command, f"Key light intensity set to {intensity:g}")

    async def set_key_light_color(self, color: ColorArg) -> str:
        return await self._send_color(CommandType.SET_KEY_LIGHT_COLOR, color, "Key light color")

    async def set_fill_light_intensity(self, intensity: IntensityArg) -> str:
        command = IntensityCommand(type=CommandType.SET_FILL_LIGHT_INTENSITY, intensity=intensity)
        return await self._send(command, f"Fill light intensity set to {intensity:g}")

    async def set_fill_light_color(self, color: ColorArg) -> str:
        return await self._send_color(CommandType.SET_FILL_LIGHT_COLOR, color, "Fill light color")

    def movement(self, command_type: CommandType, confirmation: str) -> Callable[[], Awaitable[str]]:
        """Build a parameterless handler that sends *command_type*."""

        async def handler() -> str:
            return await self._send(Command(type=command_type), confirmation)

        return handler

    # -- State queries ---------------------------------------------------------

    async def get_scene_state(self, force_refresh: ForceRefreshArg = False) -> str:
        state = await self._get_state(force_refresh)
        return json.dumps(state, indent=2, sort_keys=True)

    def field_query(self, path: tuple[str, ...], label: str) -> Callable[..., Awaitable[str]]:
        """Build a query handler that reports the state value at *path*."""

        async def handler(force_refresh: ForceRefreshArg = False) -> str:
            state = await self._get_state(force_refresh)
            value: Any = state
            for key in path:
                if not isinstance(value, dict) or key not in value:
                    msg = f"{label} is not present in the scene state reported by the browser."
                    raise ToolError(msg)
                value = value[key]
            return f"{label}: {format_value(value)}"

        return handler

    async def _get_state(self, force_refresh: bool) -> dict[str, Any]:
        session_id = current_session()
        try:
            if session_id is None:
                raise NoSessionError
            return await self._bridge.state.get_state(session_id, force_refresh=force_refresh)
        except SceneError as exc:
            raise ToolError(str(exc)) from exc

    # -- Connection ------------------------------------------------------------

    async def get_browser_connection_url(self) -> str:
        session_id = current_session()
        if session_id is None:
            raise ToolError(str(NoSessionError()))
        separator = "&" if "?" in self._browser_url else "?"
        url = f"{self._browser_url}{separator}sessionId={session_id}"
        return (
            f"To connect your browser to the 3D visualization app, open this URL:\n\n{url}\n\n"
            "Copy and paste this URL into your web browser to begin interacting with the 3D scene."
        )

    # -- Helpers ---------------------------------------------------------------

    async def _send(self, command: Command, confirmation: str) -> str:
        if await self._bridge.router.deliver(command):
            return confirmation
        return f"{confirmation}\n\n{NO_VIEWER_NOTE}"

    async def _send_color(self, command_type: CommandType, color: str, label: str, example: str = "#ffffff") -> str:
        hex_color = normalize_color(color)
        if hex_color is None:
            msg = f'Invalid color: {color}. Please use a hex code (e.g., "{example}") or an Apple crayon color name.'
            raise ToolError(msg)
        command = ColorCommand(type=command_type, color=hex_color)
        return await self._send(command, f"{label} changed to {describe_color(color, hex_color)}")


def format_value(value: Any) -> str:
    """Render a state value for a text response.

    Vectors (``{x, y, z}``) print as tuples, other structures as JSON.
    """
    if isinstance(value, dict) and value and set(value) <= {"x", "y", "z"}:
        return "(" + ", ".join(format_value(value[axis]) for axis in ("x", "y", "z") if axis in value) + ")"
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, dict | list):
        return json.dumps(value, sort_keys=True)
    return str(value)


# ---------------------------------------------------------------------------
# Static tool table
# ---------------------------------------------------------------------------

_LIGHT_MOVES = (
    ("swing", "up", "Rotate the {light} upward in an arc around the center of the model"),
    ("swing", "down", "Rotate the {light} downward in an arc around the center of the model"),
    ("swing", "left", "Rotate the {light} leftward in an arc around the center of the model"),
    ("swing", "right", "Rotate the {light} rightward in an arc around the center of the model"),
    ("walk", "in", "Move the {light} closer to the center of the model along the axis from the model origin"),
    ("walk", "out", "Move the {light} farther from the center of the model along the axis from the model origin"),
)

_FIELD_QUERIES = (
    ("get_model_color", ("model", "color"), "Model color"),
    ("get_model_scale", ("model", "scale"), "Model scale"),
    ("get_model_rotation", ("model", "rotation"), "Model rotation"),
    ("get_background_color", ("background", "color"), "Background color"),
    ("get_key_light_intensity", ("keyLight", "intensity"), "Key light intensity"),
    ("get_key_light_color", ("keyLight", "color"), "Key light color"),
    ("get_key_light_position", ("keyLight", "position"), "Key light position"),
    ("get_fill_light_intensity", ("fillLight", "intensity"), "Fill light intensity"),
    ("get_fill_light_color", ("fillLight", "color"), "Fill light color"),
    ("get_fill_light_position", ("fillLight", "position"), "Fill light position"),
    ("get_camera_position", ("camera", "position"), "Camera position"),
    ("get_camera_zoom", ("camera", "zoom"), "Camera zoom"),
)


def _title(name: str) -> str:
    return " ".join(word.capitalize() for word in name.split("_"))


def build_tool_table(tools: SceneTools) -> list[ToolSpec]:
    """Return every tool the server exposes, bound to *tools*."""
    table = [
        ToolSpec(
            "change_model_color",
            "Change Model Color",
            "Change the color of the 3D model in the scene",
            tools.change_model_color,
        ),
        ToolSpec(
            "change_model_size",
            "Change Model Size",
            "Change the uniform size of the 3D model",
            tools.change_model_size,
        ),
        ToolSpec(
            "scale_model",
            "Scale Model",
            "Scale the 3D model independently in each dimension (x, y, z)",
            tools.scale_model,
        ),
        ToolSpec(
            "change_background_color",
            "Change Background Color",
            "Change the background color of the 3D scene",
            tools.change_background_color,
        ),
        ToolSpec(
            "set_key_light_intensity",
            "Set Key Light Intensity",
            "Set the intensity of the key light (main light source)",
            tools.set_key_light_intensity,
        ),
        ToolSpec(
            "set_key_light_color",
            "Set Key Light Color",
            "Set the color of the key light",
            tools.set_key_light_color,
        ),
        ToolSpec(
            "set_fill_light_intensity",
            "Set Fill Light Intensity",
            "Set the intensity of the fill light (shadow-filling light)",
            tools.set_fill_light_intensity,
        ),
        ToolSpec(
            "set_fill_light_color",
            "Set Fill Light Color",
            "Set the color of the fill light",
            tools.set_fill_light_color,
        ),
    ]

    for light in ("key", "fill"):
        for verb, direction, description in _LIGHT_MOVES:
            name = f"{verb}_{light}_light_{direction}"
            command_type = CommandType(f"{verb}{light.capitalize()}Light{direction.capitalize()}")
            past = "swung" if verb == "swing" else "walked"
            confirmation = f"{light.capitalize()} light {past} {direction}"
            table.append(
                ToolSpec(
                    name,
                    _title(name),
                    description.format(light=f"{light} light"),
                    tools.movement(command_type, confirmation),
                )
            )

    for name, path, label in _FIELD_QUERIES:
        table.append(
            ToolSpec(
                name,
                _title(name),
                f"Report the {label.lower()} currently shown in the browser's 3D scene",
                tools.field_query(path, label),
            )
        )

    table.append(
        ToolSpec(
            "get_scene_state",
            "Get Scene State",
            "Report the full state of the browser's 3D scene (model, background, lights, camera) as JSON",
            tools.get_scene_state,
        )
    )
    table.append(
        ToolSpec(
            "get_browser_connection_url",
            "Get Browser Connection URL",
            "Get the URL to open in your browser to connect the 3D visualization app. "
            "Use this when users ask how to connect or how to open the 3D app.",
            tools.get_browser_connection_url,
        )
    )
    return table


def register_tools(mcp: FastMCP, tools: SceneTools) -> list[ToolSpec]:
    table = build_tool_table(tools)
    for spec in table:
        mcp.add_tool(spec.handler, name=spec.name, title=spec.title, description=spec.description)
    return table
