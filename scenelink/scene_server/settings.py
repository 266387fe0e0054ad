"""Service configuration loaded from SCENELINK_* environment variables."""

from __future__ import annotations

import sys
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class SceneSettings(BaseSettings):
    """Scenelink server settings.

    All fields are read from environment variables with the ``SCENELINK_``
    prefix, e.g. ``SCENELINK_WS_PORT=4001`` maps to ``ws_port``.  A ``.env``
    file in the working directory is read as well, with lower priority than
    real environment variables.  Keyword arguments passed to the constructor
    (the CLI flags) win over both.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCENELINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    mcp_port: int = 3000
    """Port of the streamable-HTTP MCP endpoint (HTTP transport only)."""

    mcp_path: str = "/mcp"

    ws_port: int = 3001
    """Port of the browser WebSocket endpoint (both transports)."""

    transport: Literal["auto", "http", "stdio"] = "auto"
    """MCP transport.  ``auto`` picks stdio when stdin is not a TTY."""

    # -- Browser ---------------------------------------------------------------
    browser_url: str = "http://localhost:5173"
    """Externally reachable URL of the 3D viewer, handed out with ``?sessionId=``."""

    ui_dir: str | None = None
    """Optional directory holding a built viewer bundle to serve on ``ws_port``."""

    # -- Sessions --------------------------------------------------------------
    query_timeout: float = 2.0
    """Seconds to wait for a ``stateResponse`` before giving up."""

    stdio_session_id: str = "stdio-session"
    """Fixed session id used for every tool call in stdio mode."""

    broadcast_without_session: bool = True
    """Broadcast commands to every viewer when a tool call has no session."""

    # -- Helpers ---------------------------------------------------------------

    def resolve_transport(self) -> Literal["http", "stdio"]:
        """Return the concrete transport, detecting a subprocess launch for ``auto``."""
        if self.transport != "auto":
            return self.transport
        return "http" if sys.stdin.isatty() else "stdio"


def get_settings() -> SceneSettings:
    """Return a cached settings instance.

    Call ``_get_settings_cached.cache_clear()`` in tests to force a re-read
    after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> SceneSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return SceneSettings()


from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
