"""State query orchestrator -- cache-or-live scene state lookups.

``get_state`` serves from the cache unless asked to refresh, otherwise runs
the three-message exchange with the browser::

    server  -> requestState{requestId, forceRefresh}
    browser -> stateResponse{requestId, state} | stateError{requestId, error}

and records every live result in the cache.  A live query that cannot
complete (no viewer, timeout, disconnect) falls back to the cached snapshot
when one exists.  A ``stateError`` from the browser is never masked.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from scenelink.scene_server.errors import NoConnectionError, StateUnavailableError
from scenelink.scene_server.models.commands import RequestState

if TYPE_CHECKING:
    from scenelink.scene_server.cache import StateCache
    from scenelink.scene_server.managers.routing import SessionRouter
    from scenelink.scene_server.pending import PendingQueryTable

DEFAULT_QUERY_TIMEOUT = 2.0


class StateQueryOrchestrator:
    """Answers "what does session X's scene look like?".

    Instantiated once per bridge.  Stateless beyond its references to the
    router, the pending-query table and the cache.
    """

    def __init__(
        self,
        router: SessionRouter,
        pending: PendingQueryTable,
        cache: StateCache,
        *,
        timeout: float = DEFAULT_QUERY_TIMEOUT,
    ) -> None:
        self._router = router
        self._pending = pending
        self._cache = cache
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def get_state(self, session_id: str, force_refresh: bool = False) -> dict[str, Any]:
        """Return the scene state for *session_id*.

        Without *force_refresh* a cached snapshot is returned as-is, with no
        round trip.  Otherwise (or on a cache miss) the browser is queried.

        Raises ``NoConnectionError``, ``QueryTimeoutError`` or
        ``DisconnectedError`` only when the live query failed and nothing is
        cached; ``BrowserReportedError`` whenever the browser answered with
        ``stateError``.
        """
        if not force_refresh:
            entry = self._cache.get(session_id)
            if entry is not None:
                logger.debug("State for session {} served from cache", session_id)
                return entry.state

        try:
            state = await self.query(session_id, force_refresh=force_refresh)
        except StateUnavailableError as exc:
            entry = self._cache.get(session_id)
            if entry is None:
                raise
            logger.warning(
                "Live state query for session {} failed ({}); serving cache from {}",
                session_id,
                exc,
                entry.captured_at.isoformat(),
            )
            return entry.state

        # The browser may have gone away between answering and this resumption.
        if self._router.has_viewer(session_id):
            self._cache.put(session_id, state)
        else:
            logger.debug("Session {} disconnected after answering; not caching its state", session_id)
        return state

    async def query(self, session_id: str, *, force_refresh: bool = True) -> dict[str, Any]:
        """Run one live round trip, bypassing the cache entirely."""
        pending = self._pending.open(session_id, self._timeout)
        try:
            request = RequestState(request_id=pending.request_id, force_refresh=force_refresh)
            if not await self._router.route_to_session(session_id, request):
                raise NoConnectionError(session_id)
            logger.debug("Waiting for state response {} (session {})", pending.request_id, session_id)
            return await pending.wait()
        finally:
            # No-op when the query was settled; cancels the timer otherwise.
            self._pending.discard(pending.request_id)
