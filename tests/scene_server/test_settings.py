from __future__ import annotations

import pytest

from scenelink.scene_server.settings import SceneSettings, get_settings


def test_defaults() -> None:
    settings = SceneSettings()
    assert settings.mcp_port == 3000
    assert settings.ws_port == 3001
    assert settings.mcp_path == "/mcp"
    assert settings.browser_url == "http://localhost:5173"
    assert settings.query_timeout == 2.0
    assert settings.stdio_session_id == "stdio-session"
    assert settings.broadcast_without_session is True


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCENELINK_WS_PORT", "4001")
    monkeypatch.setenv("SCENELINK_BROWSER_URL", "https://viewer.example.com")
    settings = get_settings()
    assert settings.ws_port == 4001
    assert settings.browser_url == "https://viewer.example.com"
    assert get_settings() is settings


def test_init_overrides_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCENELINK_MCP_PORT", "4000")
    assert SceneSettings(mcp_port=5000).mcp_port == 5000


def test_dotenv_file(tmp_path) -> None:
    (tmp_path / ".env").write_text("SCENELINK_QUERY_TIMEOUT=0.5\n")
    assert SceneSettings().query_timeout == 0.5


@pytest.mark.parametrize("transport", ["http", "stdio"])
def test_explicit_transport(transport: str) -> None:
    assert SceneSettings(transport=transport).resolve_transport() == transport


@pytest.mark.parametrize(("is_tty", "expected"), [(True, "http"), (False, "stdio")])
def test_auto_transport_follows_stdin(monkeypatch: pytest.MonkeyPatch, is_tty: bool, expected: str) -> None:
    class _Stdin:
        def isatty(self) -> bool:
            return is_tty

    monkeypatch.setattr("sys.stdin", _Stdin())
    assert SceneSettings().resolve_transport() == expected
