"""Logging configuration using loguru.

Intercepts stdlib logging so that uvicorn, mcp, httpx, etc. all flow
through loguru with a unified format.  Everything goes to stderr: in stdio
mode stdout carries the MCP JSON-RPC stream.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

NO_SESSION = "-"

# Every record carries the browser or MCP session it was logged for, bound
# with `logger.contextualize(session=...)` by the bridge and the MCP server.
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[session]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Map stdlib level name -> loguru level
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk the call stack so loguru reports the real call-site
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru as the sole logging sink.

    Call this once at process startup, before either server starts.
    """
    level = level.upper()

    logger.remove()
    logger.configure(extra={"session": NO_SESSION})
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    # Quiet down noisy libraries
    for name in ("uvicorn.access", "httpx", "httpcore", "mcp.server.lowlevel.server"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialised (level={})", level)
