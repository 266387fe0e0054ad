import click


@click.group()
def main() -> None:
    """Scenelink - drive a browser 3D scene from MCP clients."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from SCENELINK_HOST or 0.0.0.0).")
@click.option("--mcp-port", default=None, type=int, help="MCP HTTP port (default: from SCENELINK_MCP_PORT or 3000).")
@click.option("--ws-port", default=None, type=int, help="Browser WebSocket port (default: from SCENELINK_WS_PORT or 3001).")
@click.option(
    "--browser-url",
    "-u",
    default=None,
    help="Browser URL for the 3D app, e.g. https://your-app.netlify.app (overrides SCENELINK_BROWSER_URL).",
)
@click.option(
    "--transport",
    type=click.Choice(["auto", "http", "stdio"]),
    default=None,
    help="MCP transport (default: auto -- stdio when launched as a subprocess).",
)
@click.option("--log-level", default=None, help="Log level (default: from SCENELINK_LOG_LEVEL or INFO).")
def serve(
    host: str | None,
    mcp_port: int | None,
    ws_port: int | None,
    browser_url: str | None,
    transport: str | None,
    log_level: str | None,
) -> None:
    """Start the MCP server and the browser WebSocket bridge.

    Configuration priority: command line flag, environment variable,
    .env file, built-in default.
    """
    import asyncio

    from scenelink.scene_server.log import setup_logging
    from scenelink.scene_server.runner import run
    from scenelink.scene_server.settings import SceneSettings

    overrides = {
        "host": host,
        "mcp_port": mcp_port,
        "ws_port": ws_port,
        "browser_url": browser_url,
        "transport": transport,
        "log_level": log_level,
    }
    settings = SceneSettings(**{key: value for key, value in overrides.items() if value is not None})
    setup_logging(settings.log_level)

    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
