"""Browser connection handle.

The core only needs to send JSON objects to a browser and to know whether
the channel is still open; ``BrowserConnection`` captures exactly that.
``WebSocketConnection`` adapts a FastAPI/Starlette ``WebSocket``.
"""

from __future__ import annotations

import itertools
import json
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

from starlette.websockets import WebSocket, WebSocketState

_connection_ids = itertools.count(1)


@runtime_checkable
class BrowserConnection(Protocol):
    """Live duplex channel to exactly one browser instance."""

    @property
    def connection_id(self) -> str:
        """Stable handle used in logs."""
        ...

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, message: dict[str, Any]) -> None:
        """Serialise and send one message.  May raise if the channel broke."""
        ...

    async def close(self) -> None: ...


class WebSocketConnection:
    """``BrowserConnection`` over an accepted Starlette WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        client = websocket.client
        peer = f"{client.host}:{client.port}" if client else "unknown"
        self._connection_id = f"ws-{next(_connection_ids)}@{peer}"

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, message: dict[str, Any]) -> None:
        await self._websocket.send_text(json.dumps(message))

    async def messages(self) -> AsyncIterator[str | bytes]:
        """Yield text and binary frames until the browser disconnects.

        Binary frames are passed through undecoded; the parser treats them
        like text and drops them if they are not a JSON object.
        """
        while True:
            message = await self._websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
            frame = message.get("text")
            if frame is None:
                frame = message.get("bytes")
            if frame is not None:
                yield frame

    async def close(self) -> None:
        if self.is_open:
            await self._websocket.close()

    def __repr__(self) -> str:
        return f"WebSocketConnection({self._connection_id})"
