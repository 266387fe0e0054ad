"""Last known scene state per session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from loguru import logger


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot reported by a browser, as received."""

    state: dict[str, Any]
    captured_at: datetime


class StateCache:
    """Per-session snapshot store.

    Filled by ``stateUpdate`` pushes and successful live queries; emptied for
    a session when its browser disconnects.  Payloads are stored and returned
    without transformation.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def put(self, session_id: str, state: dict[str, Any], captured_at: datetime | None = None) -> CacheEntry:
        entry = CacheEntry(state=state, captured_at=captured_at or datetime.now(UTC))
        self._entries[session_id] = entry
        logger.debug("Cache: stored state for session {} (captured_at={})", session_id, entry.captured_at)
        return entry

    def get(self, session_id: str) -> CacheEntry | None:
        return self._entries.get(session_id)

    def delete(self, session_id: str) -> CacheEntry | None:
        entry = self._entries.pop(session_id, None)
        if entry is not None:
            logger.debug("Cache: dropped state for session {}", session_id)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def captured_at_from_millis(timestamp: float | None) -> datetime | None:
    """Convert a browser ``Date.now()`` value to an aware datetime.

    Returns ``None`` for a missing or out-of-range value so the cache falls
    back to the server clock.
    """
    if timestamp is None:
        return None
    try:
        return datetime.fromtimestamp(timestamp / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
