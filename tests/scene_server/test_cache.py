"""Unit tests for StateCache."""

from __future__ import annotations

from datetime import UTC, datetime

from scenelink.scene_server.cache import StateCache, captured_at_from_millis


def test_put_and_get_returns_payload_untouched() -> None:
    cache = StateCache()
    state = {"model": {"color": "#ff0000", "scale": {"x": 1, "y": 2, "z": 3}}}

    entry = cache.put("s1", state)

    assert cache.get("s1") is entry
    assert entry.state is state
    assert entry.captured_at.tzinfo is not None
    assert "s1" in cache
    assert len(cache) == 1


def test_put_overwrites() -> None:
    cache = StateCache()
    cache.put("s1", {"v": 1})
    cache.put("s1", {"v": 2})
    assert cache.get("s1").state == {"v": 2}


def test_delete_and_clear() -> None:
    cache = StateCache()
    cache.put("s1", {})
    cache.put("s2", {})

    assert cache.delete("s1") is not None
    assert cache.delete("s1") is None
    assert cache.get("s1") is None

    cache.clear()
    assert len(cache) == 0


def test_explicit_capture_time() -> None:
    cache = StateCache()
    when = datetime(2024, 1, 1, tzinfo=UTC)
    assert cache.put("s1", {}, captured_at=when).captured_at == when


def test_captured_at_from_millis() -> None:
    assert captured_at_from_millis(None) is None
    assert captured_at_from_millis(0) == datetime(1970, 1, 1, tzinfo=UTC)
    assert captured_at_from_millis(1_700_000_000_000) == datetime.fromtimestamp(1_700_000_000, tz=UTC)
    assert captured_at_from_millis(1e30) is None
