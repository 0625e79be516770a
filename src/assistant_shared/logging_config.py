"""Loguru as the single logging backend for every entry point.

The API server, the indexer CLI and the chat client each call
``setup_logging()`` once. Records from libraries that log through the
stdlib (uvicorn, httpx, openai, pinecone, pydantic-ai) are forwarded to
loguru so one sink and one format cover the whole process.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_FULL_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
# Interactive terminals: the chat REPL prints its own output around these
_COMPACT_FORMAT = "<level>{level: <8}</level> <level>{message}</level>"

# Third-party loggers forwarded to loguru. httpx logs every request at INFO,
# which drowns out the pipeline's own progress lines unless running at DEBUG.
_FORWARDED = {
    "uvicorn": None,
    "uvicorn.access": None,
    "uvicorn.error": None,
    "fastapi": None,
    "openai": None,
    "pinecone": None,
    "pydantic_ai": None,
    "httpx": logging.WARNING,
}


class InterceptHandler(logging.Handler):
    """Forward a stdlib record to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(*, level: str = "INFO", json: bool = False, compact: bool = False) -> None:
    """Replace loguru's default sink and route stdlib logging through it.

    Args:
        level: Minimum level for the stderr sink.
        json: Emit one JSON object per record (log shippers).
        compact: Level and message only, for interactive terminals.
    """
    logger.remove()
    if json:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        fmt = _COMPACT_FORMAT if compact else _FULL_FORMAT
        logger.add(sys.stderr, level=level, format=fmt, colorize=True)

    verbose = level.upper() == "DEBUG"
    intercept = InterceptHandler()
    for name, quiet_level in _FORWARDED.items():
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [intercept]
        stdlib_logger.propagate = False
        stdlib_logger.setLevel(logging.DEBUG if verbose or quiet_level is None else quiet_level)

    logging.root.handlers = [intercept]
    logging.root.setLevel(logging.DEBUG)
