"""FastAPI dependency injection for the browser endpoint.

Usage in route handlers::

    @router.websocket("/")
    async def socket(websocket: WebSocket, bridge: Bridge) -> None:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, WebSocket

from scenelink.scene_server.bridge import SceneBridge


def get_bridge(websocket: WebSocket) -> SceneBridge:
    """Return the process-wide bridge attached to the app at construction."""
    return websocket.app.state.bridge


Bridge = Annotated[SceneBridge, Depends(get_bridge)]
"""Annotated dependency: the shared ``SceneBridge``."""
