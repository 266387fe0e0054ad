"""Shared fixtures for scene-server tests.

No network: browsers are played by ``FakeConnection`` objects and inbound
frames are fed straight to ``SceneBridge.handle_frame``.
"""

from __future__ import annotations

import pytest

from scenelink.scene_server.bridge import SceneBridge
from tests.scene_server.fakes import FakeConnection, frame


@pytest.fixture
def bridge() -> SceneBridge:
    return SceneBridge(query_timeout=0.2)


@pytest.fixture
async def browser(bridge: SceneBridge) -> FakeConnection:
    """A browser already registered under session ``s1``."""
    connection = FakeConnection("browser-s1")
    session = await bridge.handle_frame(connection, frame(type="registerSession", sessionId="s1"), None)
    assert session == "s1"
    connection.sent.clear()
    return connection
