"""Pending state queries awaiting a browser answer.

Each ``requestState`` the server sends is tracked here under a fresh request
id until exactly one of four things happens:

- a matching ``stateResponse`` arrives (``resolve``)
- a matching ``stateError`` arrives (``reject``)
- the timeout timer fires
- the owning session's browser disconnects (``reject_session``)

Whichever comes first removes the entry and settles its future; later
arrivals for the same id find nothing and are dropped.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from scenelink.scene_server.errors import QueryTimeoutError


@dataclass
class PendingQuery:
    """Bookkeeping for one in-flight ``requestState``."""

    request_id: str
    session_id: str
    future: asyncio.Future[dict[str, Any]]
    timeout: float
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    async def wait(self) -> dict[str, Any]:
        """Wait for the browser's state payload.

        Raises whatever the query was rejected with: ``QueryTimeoutError``,
        ``DisconnectedError`` or ``BrowserReportedError``.
        """
        return await self.future


class PendingQueryTable:
    """Request-id keyed table of pending queries.

    Lives on the event loop: timers are scheduled with ``loop.call_later``
    and every settle path runs on the loop thread, so no locking is needed.
    """

    def __init__(self) -> None:
        self._pending: dict[str, PendingQuery] = {}

    # -- Create ----------------------------------------------------------------

    def open(self, session_id: str, timeout: float) -> PendingQuery:
        """Create and track a query for *session_id* that expires after *timeout* seconds."""
        loop = asyncio.get_running_loop()
        request_id = self._new_request_id()
        query = PendingQuery(
            request_id=request_id,
            session_id=session_id,
            future=loop.create_future(),
            timeout=timeout,
        )
        query.timer = loop.call_later(timeout, self._expire, request_id)
        self._pending[request_id] = query
        logger.debug("Pending: opened {} for session {} (timeout={}s)", request_id, session_id, timeout)
        return query

    def _new_request_id(self) -> str:
        while True:
            request_id = uuid.uuid4().hex
            if request_id not in self._pending:
                return request_id

    # -- Settle ----------------------------------------------------------------

    def resolve(self, request_id: str, state: dict[str, Any]) -> bool:
        """Complete the query with *state*.  Returns ``False`` for unknown or settled ids."""
        query = self._take(request_id)
        if query is None:
            logger.debug("Pending: dropping response for unknown request {}", request_id)
            return False
        if not query.future.done():
            query.future.set_result(state)
        return True

    def reject(self, request_id: str, error: BaseException) -> bool:
        """Fail the query with *error*.  Returns ``False`` for unknown or settled ids."""
        query = self._take(request_id)
        if query is None:
            logger.debug("Pending: dropping error for unknown request {}", request_id)
            return False
        _fail(query, error)
        return True

    def reject_session(self, session_id: str, error: BaseException) -> int:
        """Fail every query owned by *session_id*.  Returns how many were failed."""
        request_ids = [rid for rid, q in self._pending.items() if q.session_id == session_id]
        for request_id in request_ids:
            query = self._take(request_id)
            if query is not None:
                _fail(query, error)
        if request_ids:
            logger.info("Pending: rejected {} queries for session {}", len(request_ids), session_id)
        return len(request_ids)

    def reject_all(self, error_factory: Callable[[str], BaseException]) -> int:
        """Fail every query with ``error_factory(session_id)``.  Used at shutdown."""
        queries = list(self._pending.values())
        for query in queries:
            if self._take(query.request_id) is not None:
                _fail(query, error_factory(query.session_id))
        return len(queries)

    def discard(self, request_id: str) -> bool:
        """Stop tracking a query without settling it (e.g. the send never happened)."""
        return self._take(request_id) is not None

    def _expire(self, request_id: str) -> None:
        query = self._pending.pop(request_id, None)
        if query is None:
            return
        logger.warning(
            "Pending: request {} for session {} timed out after {}s",
            request_id,
            query.session_id,
            query.timeout,
        )
        if not query.future.done():
            query.future.set_exception(QueryTimeoutError(query.session_id, request_id, query.timeout))

    def _take(self, request_id: str) -> PendingQuery | None:
        query = self._pending.pop(request_id, None)
        if query is not None and query.timer is not None:
            query.timer.cancel()
        return query

    # -- Query -----------------------------------------------------------------

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def for_session(self, session_id: str) -> list[PendingQuery]:
        return [q for q in self._pending.values() if q.session_id == session_id]


def _fail(query: PendingQuery, error: BaseException) -> None:
    if not query.future.done():
        query.future.set_exception(error)
