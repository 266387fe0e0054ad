"""FastMCP server that runs every tool call inside its session's scope.

The MCP session id of a streamable-HTTP call arrives in the
``mcp-session-id`` header.  ``SceneMCP.call_tool`` reads it from the
request context the SDK keeps for the call and binds it with
``session_scope`` before dispatching, so tool handlers need no session
parameter.  In stdio mode there is a single client and every call runs
under the configured fixed session id.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from loguru import logger
from mcp.server.fastmcp import FastMCP

from scenelink.scene_server.context import session_scope
from scenelink.scene_server.log import NO_SESSION
from scenelink.scene_server.mcp.tools import SceneTools, register_tools
from scenelink.scene_server.models.commands import ToolCallNotice

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scenelink.scene_server.bridge import SceneBridge
    from scenelink.scene_server.settings import SceneSettings

MCP_SESSION_HEADER = "mcp-session-id"
SERVER_NAME = "3d-model-server"


class SceneMCP(FastMCP):
    """FastMCP with per-call session binding and tool-call notices."""

    def __init__(self, bridge: SceneBridge, *, fixed_session_id: str | None = None, **settings: Any) -> None:
        super().__init__(SERVER_NAME, **settings)
        self.bridge = bridge
        self._fixed_session_id = fixed_session_id

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Sequence[Any] | dict[str, Any]:
        session_id = self.resolve_session_id()
        logger.debug("MCP tool called: {} (session: {})", name, session_id or "none")
        with session_scope(session_id), logger.contextualize(session=session_id or NO_SESSION):
            if session_id is not None:
                await self._notify_tool_call(session_id, name)
            return await super().call_tool(name, arguments)

    def resolve_session_id(self) -> str | None:
        """Session of the tool call being dispatched, or ``None`` if it has none."""
        if self._fixed_session_id is not None:
            return self._fixed_session_id
        try:
            request = self.get_context().request_context.request
        except (LookupError, ValueError):
            return None
        if request is None:
            return None
        return request.headers.get(MCP_SESSION_HEADER) or None

    async def _notify_tool_call(self, session_id: str, tool_name: str) -> None:
        if self.bridge.registry.lookup(session_id) is None:
            logger.debug("Tool call notice for {} not sent - no browser for session {}", tool_name, session_id)
            return
        notice = ToolCallNotice(tool_name=tool_name, timestamp=int(time.time() * 1000))
        await self.bridge.router.route_to_session(session_id, notice)


def build_mcp(bridge: SceneBridge, settings: SceneSettings, *, stdio: bool = False) -> SceneMCP:
    """Create the MCP server with every scene tool registered."""
    mcp = SceneMCP(
        bridge,
        fixed_session_id=settings.stdio_session_id if stdio else None,
        host=settings.host,
        port=settings.mcp_port,
        streamable_http_path=settings.mcp_path,
    )
    register_tools(mcp, SceneTools(bridge, browser_url=settings.browser_url))
    return mcp
