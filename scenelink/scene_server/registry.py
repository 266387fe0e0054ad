"""In-process connection registry.

Maps a session id to the one live browser connection serving it.
Ephemeral -- empty on process restart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from scenelink.scene_server.connection import BrowserConnection


class ShuttingDownError(RuntimeError):
    """Raised when a browser tries to register during shutdown."""


class ConnectionRegistry:
    """Registry of browser connections keyed by session id.

    All mutation happens on the event loop thread (inbound WebSocket frames,
    tool calls, timers), so plain dict operations are race-free.

    Re-registering a session is last-writer-wins: the previous connection is
    dropped from the map but not closed.
    """

    def __init__(self) -> None:
        self._connections: dict[str, BrowserConnection] = {}
        self._shutting_down = False

    # -- Mutation --------------------------------------------------------------

    def register(self, session_id: str, connection: BrowserConnection) -> BrowserConnection | None:
        """Store *connection* for *session_id*.  Returns the superseded connection, if any."""
        if self._shutting_down:
            raise ShuttingDownError
        previous = self._connections.get(session_id)
        self._connections[session_id] = connection
        if previous is not None and previous is not connection:
            logger.info(
                "Registry: session {} re-registered ({} supersedes {})",
                session_id,
                connection.connection_id,
                previous.connection_id,
            )
            return previous
        logger.debug("Registry: register session {} ({})", session_id, connection.connection_id)
        return None

    def unregister(self, session_id: str, connection: BrowserConnection | None = None) -> BrowserConnection | None:
        """Remove the mapping for *session_id*.  No-op if absent.

        When *connection* is given, the mapping is only removed if it still
        points at that connection, so a superseded connection closing late
        cannot evict its replacement.
        """
        current = self._connections.get(session_id)
        if current is None:
            return None
        if connection is not None and current is not connection:
            logger.debug(
                "Registry: keep session {} ({} was superseded by {})",
                session_id,
                connection.connection_id,
                current.connection_id,
            )
            return None
        del self._connections[session_id]
        logger.debug("Registry: unregister session {}", session_id)
        return current

    # -- Query -----------------------------------------------------------------

    def lookup(self, session_id: str) -> BrowserConnection | None:
        return self._connections.get(session_id)

    def all_connections(self) -> list[BrowserConnection]:
        """Return a snapshot of all registered connections."""
        return list(self._connections.values())

    def sessions(self) -> list[str]:
        return list(self._connections)

    @property
    def active_count(self) -> int:
        return len(self._connections)

    # -- Lifecycle -------------------------------------------------------------

    def begin_shutdown(self) -> None:
        """Refuse new registrations from now on."""
        self._shutting_down = True
        logger.info("Registry: shutdown initiated, refusing new registrations")

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down
