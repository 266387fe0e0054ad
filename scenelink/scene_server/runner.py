"""Process runner -- both transports on one event loop.

The browser bridge (FastAPI over uvicorn) always runs on ``ws_port``.  The
MCP side is either a second uvicorn server hosting FastMCP's
streamable-HTTP app on ``mcp_port``, or FastMCP over stdin/stdout.  When
any side stops, the others are asked to exit.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import uvicorn
from loguru import logger

from scenelink.scene_server.app import create_app, create_bridge
from scenelink.scene_server.mcp.server import build_mcp

if TYPE_CHECKING:
    from starlette.types import ASGIApp

    from scenelink.scene_server.settings import SceneSettings


def _uvicorn_server(app: ASGIApp, host: str, port: int) -> uvicorn.Server:
    # uvicorn's own logging is intercepted by loguru
    config = uvicorn.Config(app, host=host, port=port, log_level="warning")
    return uvicorn.Server(config)


async def run(settings: SceneSettings) -> None:
    transport = settings.resolve_transport()
    bridge = create_bridge(settings)
    mcp = build_mcp(bridge, settings, stdio=transport == "stdio")
    browser_server = _uvicorn_server(create_app(bridge, settings), settings.host, settings.ws_port)

    logger.info("WebSocket server listening on ws://{}:{}", settings.host, settings.ws_port)
    logger.info("Browser URL configured: {}", settings.browser_url)

    if transport == "stdio":
        logger.info("Running in STDIO mode (session id: {})", settings.stdio_session_id)
        browser_task = asyncio.create_task(browser_server.serve())
        try:
            await mcp.run_stdio_async()
        finally:
            browser_server.should_exit = True
            await browser_task
        return

    logger.info("MCP server listening on http://{}:{}{}", settings.host, settings.mcp_port, settings.mcp_path)
    mcp_server = _uvicorn_server(mcp.streamable_http_app(), settings.host, settings.mcp_port)
    servers = [browser_server, mcp_server]
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for server in servers:
        server.should_exit = True
    await asyncio.gather(*tasks)
    logger.info("Servers stopped")
