"""Request-scoped session context.

Tool handlers are registered once and invoked concurrently for many MCP
sessions.  The MCP layer enters ``session_scope`` around each tool call; any
code running inside it, across awaits, sees that call's session through
``current_session()``.

Backed by a ``ContextVar``: every asyncio task runs in its own copy of the
context, so interleaved calls for different sessions never observe each
other's value.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

T = TypeVar("T")

_current_session: ContextVar[str | None] = ContextVar("scenelink_current_session", default=None)


def current_session() -> str | None:
    """Return the session id of the executing tool call, or ``None`` outside one."""
    return _current_session.get()


@contextmanager
def session_scope(session_id: str | None) -> Iterator[None]:
    """Bind *session_id* for the duration of the block.

    Scopes nest; leaving a scope restores whatever the enclosing one bound.
    Passing ``None`` explicitly marks the block as session-less.
    """
    token = _current_session.set(session_id)
    try:
        yield
    finally:
        _current_session.reset(token)


async def run_with_session(session_id: str | None, body: Callable[[], Awaitable[T]]) -> T:
    """Await ``body()`` with *session_id* bound as the current session."""
    with session_scope(session_id):
        return await body()
