"""Logging for the boardshelf service and CLI.

Boardshelf code logs through ``loguru.logger`` directly: tree hydration and
shutdown flushes at INFO, debounced payload writes at DEBUG, swallowed
store and decode failures at WARNING.  The stores' client libraries (redis,
boto3/botocore) and the server stack (uvicorn, httpx) still use stdlib
``logging``; their records are forwarded here so one stderr stream shows
both.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Per-request chatter from the HTTP layer and the S3 client.
_QUIET_AT_WARNING = ("uvicorn.access", "httpx", "httpcore", "botocore", "boto3", "urllib3")


class _StdlibForwarder(logging.Handler):
    """Re-emit a stdlib ``LogRecord`` through loguru at the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """Send all boardshelf and library logging to stderr at ``level``.

    Called by the app lifespan and by each offline CLI command; calling it
    again replaces the previous sink.
    """
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)

    logging.basicConfig(handlers=[_StdlibForwarder()], level=0, force=True)

    for name in _QUIET_AT_WARNING:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured (level={})", level)
