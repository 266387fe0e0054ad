"""Unit tests for PendingQueryTable."""

from __future__ import annotations

import asyncio

import pytest

from scenelink.scene_server.errors import BrowserReportedError, DisconnectedError, QueryTimeoutError
from scenelink.scene_server.pending import PendingQueryTable


@pytest.fixture
def table() -> PendingQueryTable:
    return PendingQueryTable()


async def test_resolve_completes_waiter(table: PendingQueryTable) -> None:
    query = table.open("s1", timeout=1.0)
    assert query.request_id in table

    assert table.resolve(query.request_id, {"model": {"color": "#ff0000"}}) is True

    assert await query.wait() == {"model": {"color": "#ff0000"}}
    assert query.request_id not in table
    assert query.timer is not None
    assert query.timer.cancelled()


async def test_request_ids_are_unique(table: PendingQueryTable) -> None:
    queries = [table.open("s1", timeout=1.0) for _ in range(50)]
    assert len({q.request_id for q in queries}) == 50
    assert len(table) == 50
    for query in queries:
        table.discard(query.request_id)
    assert len(table) == 0


async def test_duplicate_resolve_is_noop(table: PendingQueryTable) -> None:
    query = table.open("s1", timeout=1.0)
    assert table.resolve(query.request_id, {"a": 1}) is True
    assert table.resolve(query.request_id, {"a": 2}) is False
    assert table.reject(query.request_id, BrowserReportedError("s1", "late")) is False
    assert await query.wait() == {"a": 1}


async def test_unknown_request_id_is_dropped(table: PendingQueryTable) -> None:
    assert table.resolve("nope", {}) is False
    assert table.reject("nope", RuntimeError("x")) is False


async def test_reject_propagates_error(table: PendingQueryTable) -> None:
    query = table.open("s1", timeout=1.0)
    table.reject(query.request_id, BrowserReportedError("s1", "scene not ready"))

    with pytest.raises(BrowserReportedError, match="scene not ready"):
        await query.wait()


async def test_timeout_expires_entry(table: PendingQueryTable) -> None:
    query = table.open("s1", timeout=0.01)

    with pytest.raises(QueryTimeoutError) as exc_info:
        await query.wait()

    assert exc_info.value.request_id == query.request_id
    assert query.request_id not in table
    # A response arriving after expiry is ignored.
    assert table.resolve(query.request_id, {"late": True}) is False


async def test_reject_session_only_touches_that_session(table: PendingQueryTable) -> None:
    a1 = table.open("a", timeout=1.0)
    a2 = table.open("a", timeout=1.0)
    b = table.open("b", timeout=1.0)

    assert table.reject_session("a", DisconnectedError("a")) == 2

    for query in (a1, a2):
        with pytest.raises(DisconnectedError):
            await query.wait()
    assert b.request_id in table
    assert table.for_session("b") == [b]
    assert not b.future.done()
    table.discard(b.request_id)


async def test_discard_cancels_timer_without_settling(table: PendingQueryTable) -> None:
    query = table.open("s1", timeout=0.01)
    assert table.discard(query.request_id) is True
    assert table.discard(query.request_id) is False

    await asyncio.sleep(0.03)
    assert not query.future.done()
