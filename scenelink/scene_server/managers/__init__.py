"""Routing and state managers for the scene server.

Managers work on the shared in-memory structures (registry, pending table,
cache) and raise domain exceptions from ``scenelink.scene_server.errors``,
never tool errors -- that translation is the MCP layer's responsibility.
"""
