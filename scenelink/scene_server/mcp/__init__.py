"""MCP surface of the scene server: tool table and FastMCP binding."""

from scenelink.scene_server.mcp.server import SceneMCP, build_mcp
from scenelink.scene_server.mcp.tools import SceneTools, ToolSpec, build_tool_table, register_tools

__all__ = ["SceneMCP", "SceneTools", "ToolSpec", "build_mcp", "build_tool_table", "register_tools"]
