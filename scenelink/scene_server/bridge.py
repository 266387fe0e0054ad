"""Scene bridge -- owns the session core and speaks the browser protocol.

One ``SceneBridge`` is built per process (or per test).  It constructs the
connection registry, pending-query table and state cache, wires the router
and state orchestrator on top of them, and is the single place that
handles inbound browser frames and disconnects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from scenelink.scene_server.cache import StateCache, captured_at_from_millis
from scenelink.scene_server.errors import BrowserReportedError, DisconnectedError, MalformedMessageError
from scenelink.scene_server.log import NO_SESSION
from scenelink.scene_server.managers.routing import SessionRouter
from scenelink.scene_server.managers.state import DEFAULT_QUERY_TIMEOUT, StateQueryOrchestrator
from scenelink.scene_server.models.commands import ErrorNotice, SessionRegistered
from scenelink.scene_server.models.messages import (
    RegisterSession,
    StateError,
    StateResponse,
    StateUpdate,
    parse_inbound,
)
from scenelink.scene_server.pending import PendingQueryTable
from scenelink.scene_server.registry import ConnectionRegistry, ShuttingDownError

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from scenelink.scene_server.connection import BrowserConnection

UNREGISTERED_MESSAGE = "Session not registered. Please send registerSession message first."


class SceneBridge:
    """Process-wide session routing and state synchronisation."""

    def __init__(
        self,
        *,
        query_timeout: float = DEFAULT_QUERY_TIMEOUT,
        broadcast_without_session: bool = True,
    ) -> None:
        self.registry = ConnectionRegistry()
        self.pending = PendingQueryTable()
        self.cache = StateCache()
        self.router = SessionRouter(self.registry, broadcast_without_session=broadcast_without_session)
        self.state = StateQueryOrchestrator(self.router, self.pending, self.cache, timeout=query_timeout)

    # -- Connection lifecycle --------------------------------------------------

    async def serve(self, connection: BrowserConnection, frames: AsyncIterable[str | bytes]) -> None:
        """Process *frames* from *connection* until the browser goes away."""
        logger.info("Browser connected ({}), waiting for registerSession", connection.connection_id)
        session_id: str | None = None
        try:
            async for raw in frames:
                with logger.contextualize(session=session_id or NO_SESSION):
                    session_id = await self.handle_frame(connection, raw, session_id)
        finally:
            with logger.contextualize(session=session_id or NO_SESSION):
                self.handle_disconnect(connection, session_id)

    async def handle_frame(self, connection: BrowserConnection, raw: str | bytes, session_id: str | None) -> str | None:
        """Handle one inbound frame.  Returns the connection's session id afterwards."""
        try:
            message = parse_inbound(raw)
        except MalformedMessageError as exc:
            logger.warning("Dropping malformed message from {}: {}", connection.connection_id, exc)
            if session_id is None:
                await self._reply(connection, ErrorNotice(message=f"Malformed message ({exc}). {UNREGISTERED_MESSAGE}"))
            return session_id

        match message:
            case RegisterSession():
                return await self._on_register(connection, message, session_id)
            case _ if session_id is None:
                logger.warning("Received {} from unregistered client {}", message.type, connection.connection_id)
                await self._reply(connection, ErrorNotice(message=UNREGISTERED_MESSAGE))
            case StateResponse():
                self._on_state_response(message, session_id)
            case StateError():
                self._on_state_error(message, session_id)
            case StateUpdate():
                self._on_state_update(connection, message, session_id)
        return session_id

    def handle_disconnect(self, connection: BrowserConnection, session_id: str | None) -> None:
        """Tear down *session_id* if *connection* still serves it.

        Pending queries are failed immediately rather than left to time out,
        and the cached snapshot is discarded.
        """
        if session_id is None:
            logger.info("Browser disconnected ({}, unregistered)", connection.connection_id)
            return
        if self.registry.unregister(session_id, connection) is None:
            logger.info("Superseded browser {} for session {} disconnected", connection.connection_id, session_id)
            return
        logger.info("Browser disconnected (session {})", session_id)
        self._drop_session(session_id)

    async def shutdown(self) -> None:
        """Refuse new browsers, fail in-flight queries, close every connection."""
        self.registry.begin_shutdown()
        rejected = self.pending.reject_all(DisconnectedError)
        if rejected:
            logger.info("Shutdown: rejected {} in-flight state queries", rejected)
        for connection in self.registry.all_connections():
            try:
                await connection.close()
            except Exception:
                logger.exception("Failed to close {}", connection.connection_id)
        self.cache.clear()

    # -- Inbound handlers ------------------------------------------------------

    async def _on_register(
        self,
        connection: BrowserConnection,
        message: RegisterSession,
        previous_session: str | None,
    ) -> str | None:
        try:
            self.registry.register(message.session_id, connection)
        except ShuttingDownError:
            await self._reply(connection, ErrorNotice(message="Server is shutting down."))
            return previous_session

        if previous_session is not None and previous_session != message.session_id:
            if self.registry.unregister(previous_session, connection) is not None:
                logger.info("Browser {} left session {}", connection.connection_id, previous_session)
                self._drop_session(previous_session)
        logger.info("Browser {} registered with session {}", connection.connection_id, message.session_id)
        await self._reply(connection, SessionRegistered(session_id=message.session_id))
        return message.session_id

    def _on_state_response(self, message: StateResponse, session_id: str) -> None:
        if not self.pending.resolve(message.request_id, message.state):
            logger.debug("Late or duplicate stateResponse {} from session {}", message.request_id, session_id)

    def _on_state_error(self, message: StateError, session_id: str) -> None:
        error = BrowserReportedError(session_id, message.error)
        if not self.pending.reject(message.request_id, error):
            logger.debug("Late or duplicate stateError {} from session {}", message.request_id, session_id)

    def _on_state_update(self, connection: BrowserConnection, message: StateUpdate, session_id: str) -> None:
        if self.registry.lookup(session_id) is not connection:
            logger.debug("Ignoring stateUpdate from superseded browser {}", connection.connection_id)
            return
        self.cache.put(session_id, message.state, captured_at_from_millis(message.timestamp))

    def _drop_session(self, session_id: str) -> None:
        """Fail the session's in-flight queries and forget its snapshot."""
        self.pending.reject_session(session_id, DisconnectedError(session_id))
        self.cache.delete(session_id)

    async def _reply(self, connection: BrowserConnection, notice: ErrorNotice | SessionRegistered) -> None:
        try:
            await connection.send_json(notice.to_wire())
        except Exception:
            logger.exception("Failed to reply {} to {}", notice.type, connection.connection_id)
