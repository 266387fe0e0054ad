"""Unit tests for ConnectionRegistry."""

from __future__ import annotations

import pytest

from scenelink.scene_server.registry import ConnectionRegistry, ShuttingDownError
from tests.scene_server.fakes import FakeConnection


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


def test_register_and_lookup(registry: ConnectionRegistry) -> None:
    conn = FakeConnection()
    assert registry.register("s1", conn) is None
    assert registry.lookup("s1") is conn
    assert registry.lookup("missing") is None
    assert registry.active_count == 1


def test_reregister_is_last_writer_wins(registry: ConnectionRegistry) -> None:
    first = FakeConnection("first")
    second = FakeConnection("second")
    registry.register("s1", first)

    superseded = registry.register("s1", second)

    assert superseded is first
    assert registry.lookup("s1") is second
    # The old handle is not closed by the registry.
    assert first.closed is False


def test_unregister_is_idempotent(registry: ConnectionRegistry) -> None:
    conn = FakeConnection()
    registry.register("s1", conn)

    assert registry.unregister("s1") is conn
    assert registry.unregister("s1") is None
    assert registry.lookup("s1") is None
    assert registry.active_count == 0


def test_unregister_keeps_newer_connection(registry: ConnectionRegistry) -> None:
    old = FakeConnection("old")
    new = FakeConnection("new")
    registry.register("s1", old)
    registry.register("s1", new)

    assert registry.unregister("s1", old) is None
    assert registry.lookup("s1") is new

    assert registry.unregister("s1", new) is new
    assert registry.lookup("s1") is None


def test_snapshots(registry: ConnectionRegistry) -> None:
    a, b = FakeConnection("a"), FakeConnection("b")
    registry.register("s1", a)
    registry.register("s2", b)

    assert set(registry.sessions()) == {"s1", "s2"}
    connections = registry.all_connections()
    registry.unregister("s1")
    # Snapshot is unaffected by later mutation.
    assert len(connections) == 2


def test_register_refused_during_shutdown(registry: ConnectionRegistry) -> None:
    registry.begin_shutdown()
    assert registry.is_shutting_down
    with pytest.raises(ShuttingDownError):
        registry.register("s1", FakeConnection())
