"""Session router -- delivers commands to the browser serving a session.

Two delivery paths, kept apart on purpose:

- ``route_to_session``: the one connection registered for a session.
- ``broadcast``: every open connection.  Only for tool calls that carry no
  session at all (a degraded deployment where isolation is meaningless).

``deliver`` picks exactly one of them from the ambient session context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from scenelink.scene_server.context import current_session

if TYPE_CHECKING:
    from scenelink.scene_server.connection import BrowserConnection
    from scenelink.scene_server.models.commands import WireModel
    from scenelink.scene_server.registry import ConnectionRegistry


class SessionRouter:
    """Routes outbound messages through the connection registry.

    ``broadcast_without_session`` controls what happens to a message sent
    outside any session scope: broadcast it (trading isolation for
    reachability) or drop it with a warning.
    """

    def __init__(self, registry: ConnectionRegistry, *, broadcast_without_session: bool = True) -> None:
        self._registry = registry
        self._broadcast_without_session = broadcast_without_session

    async def route_to_session(self, session_id: str, message: WireModel | dict[str, Any]) -> bool:
        """Send *message* to the browser registered for *session_id*.

        Returns ``False`` when no open connection exists or the send failed.
        That is not an error: the command was accepted, nobody is watching.
        """
        connection = self._registry.lookup(session_id)
        payload = _payload(message)
        if connection is None or not connection.is_open:
            logger.warning("No active browser connection for session {} ({} not sent)", session_id, payload.get("type"))
            return False
        delivered = await _send(connection, payload)
        if delivered:
            logger.debug("Routed {} to session {}", payload.get("type"), session_id)
        return delivered

    def has_viewer(self, session_id: str) -> bool:
        """Whether a browser is currently registered for *session_id*."""
        return self._registry.lookup(session_id) is not None

    async def broadcast(self, message: WireModel | dict[str, Any]) -> int:
        """Send *message* to every open connection.  Returns the number reached."""
        payload = _payload(message)
        delivered = 0
        for connection in self._registry.all_connections():
            if connection.is_open and await _send(connection, payload):
                delivered += 1
        logger.debug("Broadcast {} to {} connection(s)", payload.get("type"), delivered)
        return delivered

    async def deliver(self, message: WireModel | dict[str, Any]) -> bool:
        """Send *message* on behalf of the current tool call.

        With a session in context this is ``route_to_session``.  Without one,
        it broadcasts if allowed, else logs and drops.  Returns whether at
        least one browser received it.
        """
        session_id = current_session()
        if session_id is not None:
            return await self.route_to_session(session_id, message)

        payload = _payload(message)
        if not self._broadcast_without_session:
            logger.warning("Tool call has no session context; {} not routed", payload.get("type"))
            return False
        if self._registry.active_count == 0:
            logger.warning("No session context and no browsers connected; {} not routed", payload.get("type"))
            return False
        logger.info("No session context; broadcasting {} to all browsers", payload.get("type"))
        return await self.broadcast(payload) > 0


def _payload(message: WireModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(message, dict):
        return message
    return message.to_wire()


async def _send(connection: BrowserConnection, payload: dict[str, Any]) -> bool:
    try:
        await connection.send_json(payload)
    except Exception:
        logger.exception("Failed to send {} to {}", payload.get("type"), connection.connection_id)
        return False
    return True
