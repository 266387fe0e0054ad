"""Tests for SessionRouter delivery semantics."""

from __future__ import annotations

import pytest

from scenelink.scene_server.context import session_scope
from scenelink.scene_server.managers.routing import SessionRouter
from scenelink.scene_server.models.commands import ColorCommand, Command
from scenelink.scene_server.models.enums import CommandType
from scenelink.scene_server.registry import ConnectionRegistry
from tests.scene_server.fakes import FakeConnection

RED = ColorCommand(type=CommandType.CHANGE_COLOR, color="#ff0000")


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def router(registry: ConnectionRegistry) -> SessionRouter:
    return SessionRouter(registry)


async def test_route_to_unknown_session_returns_false(router: SessionRouter) -> None:
    assert await router.route_to_session("nobody", RED) is False


async def test_route_to_session_sends_wire_payload(router: SessionRouter, registry: ConnectionRegistry) -> None:
    conn = FakeConnection()
    registry.register("s1", conn)

    assert await router.route_to_session("s1", RED) is True
    assert conn.sent == [{"type": "changeColor", "color": "#ff0000"}]


async def test_route_only_reaches_target_session(router: SessionRouter, registry: ConnectionRegistry) -> None:
    a, b = FakeConnection("a"), FakeConnection("b")
    registry.register("a", a)
    registry.register("b", b)

    await router.route_to_session("a", Command(type=CommandType.SWING_KEY_LIGHT_UP))

    assert a.sent == [{"type": "swingKeyLightUp"}]
    assert b.sent == []


async def test_per_session_order_is_preserved(router: SessionRouter, registry: ConnectionRegistry) -> None:
    conn = FakeConnection()
    registry.register("s1", conn)

    for command_type in (CommandType.WALK_KEY_LIGHT_IN, CommandType.WALK_KEY_LIGHT_OUT, CommandType.SWING_FILL_LIGHT_UP):
        await router.route_to_session("s1", Command(type=command_type))

    assert [m["type"] for m in conn.sent] == ["walkKeyLightIn", "walkKeyLightOut", "swingFillLightUp"]


async def test_closed_connection_is_not_delivered(router: SessionRouter, registry: ConnectionRegistry) -> None:
    conn = FakeConnection()
    conn.is_open = False
    registry.register("s1", conn)

    assert await router.route_to_session("s1", RED) is False
    assert conn.sent == []


async def test_send_failure_reports_not_delivered(router: SessionRouter, registry: ConnectionRegistry) -> None:
    registry.register("s1", FakeConnection(fail_send=True))
    assert await router.route_to_session("s1", RED) is False


async def test_broadcast_skips_broken_connections(router: SessionRouter, registry: ConnectionRegistry) -> None:
    good, broken, closed = FakeConnection("good"), FakeConnection("broken", fail_send=True), FakeConnection("closed")
    closed.is_open = False
    registry.register("a", good)
    registry.register("b", broken)
    registry.register("c", closed)

    assert await router.broadcast(RED) == 1
    assert good.sent == [RED.to_wire()]


async def test_deliver_uses_session_context(router: SessionRouter, registry: ConnectionRegistry) -> None:
    a, b = FakeConnection("a"), FakeConnection("b")
    registry.register("a", a)
    registry.register("b", b)

    with session_scope("b"):
        assert await router.deliver(RED) is True

    assert a.sent == []
    assert b.sent == [RED.to_wire()]


async def test_deliver_with_session_never_broadcasts(router: SessionRouter, registry: ConnectionRegistry) -> None:
    other = FakeConnection("other")
    registry.register("other", other)

    with session_scope("missing"):
        assert await router.deliver(RED) is False

    assert other.sent == []


async def test_deliver_without_session_broadcasts(router: SessionRouter, registry: ConnectionRegistry) -> None:
    a, b = FakeConnection("a"), FakeConnection("b")
    registry.register("a", a)
    registry.register("b", b)

    assert await router.deliver(RED) is True
    assert a.sent == b.sent == [RED.to_wire()]


async def test_deliver_without_session_and_no_browsers(router: SessionRouter) -> None:
    assert await router.deliver(RED) is False


async def test_deliver_without_session_can_be_disabled(registry: ConnectionRegistry) -> None:
    conn = FakeConnection()
    registry.register("s1", conn)
    router = SessionRouter(registry, broadcast_without_session=False)

    assert await router.deliver(RED) is False
    assert conn.sent == []
