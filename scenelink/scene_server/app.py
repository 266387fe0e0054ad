from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from scenelink.scene_server.bridge import SceneBridge
from scenelink.scene_server.routers.browser import router as browser_router
from scenelink.scene_server.settings import SceneSettings, get_settings


def create_bridge(settings: SceneSettings) -> SceneBridge:
    return SceneBridge(
        query_timeout=settings.query_timeout,
        broadcast_without_session=settings.broadcast_without_session,
    )


def create_app(bridge: SceneBridge | None = None, settings: SceneSettings | None = None) -> FastAPI:
    """Build the browser-facing app: WebSocket bridge, health check, optional viewer bundle."""
    settings = settings or get_settings()
    bridge = bridge or create_bridge(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Browser bridge starting (ws_port={})", settings.ws_port)
        yield
        logger.info("Browser bridge shutting down (connections={})", bridge.registry.active_count)
        await bridge.shutdown()

    app = FastAPI(title="Scenelink Browser Bridge", lifespan=lifespan)
    app.state.bridge = bridge

    @app.get("/health")
    async def health() -> dict[str, str | int]:
        return {"status": "ok", "connections": bridge.registry.active_count}

    app.include_router(browser_router)

    # -----------------------------------------------------------------------
    # Static viewer serving (SCENELINK_UI_DIR), for single-host deployments.
    # -----------------------------------------------------------------------
    if settings.ui_dir and Path(settings.ui_dir).is_dir():
        ui_dir = Path(settings.ui_dir)
        if (ui_dir / "assets").is_dir():
            app.mount("/assets", StaticFiles(directory=ui_dir / "assets"), name="ui-assets")

        @app.get("/{full_path:path}")
        async def serve_spa(full_path: str) -> FileResponse:
            """Serve the viewer's index.html for all unmatched routes (client-side routing)."""
            file_path = ui_dir / full_path
            if file_path.is_file():
                return FileResponse(file_path)
            return FileResponse(ui_dir / "index.html")

        logger.info("Serving viewer bundle from {}", ui_dir)

    return app
