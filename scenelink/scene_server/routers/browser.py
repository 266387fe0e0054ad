"""Browser WebSocket endpoint.

Thin adapter -- accepts the socket and hands its frames to the bridge.
"""

from __future__ import annotations

from fastapi import APIRouter, WebSocket

from scenelink.scene_server.connection import WebSocketConnection
from scenelink.scene_server.deps import Bridge

router = APIRouter(tags=["browser"])


@router.websocket("/")
async def handle_browser_socket(websocket: WebSocket, bridge: Bridge) -> None:
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    await bridge.serve(connection, connection.messages())
