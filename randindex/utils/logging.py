"""Loguru sink configuration for harness runs."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from randindex.config import settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "{thread.name} | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {thread.name} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(
    log_level: str | None = None, log_file: str | Path | None = None
) -> None:
    """Configure Loguru sinks.

    Engine threads log through the same sinks as the test thread, so the
    thread name is part of every record.

    Args:
        log_level: Logging level (e.g., "DEBUG", "INFO"). Defaults to
            ``settings.log_level``, or DEBUG when ``settings.verbose`` is set.
        log_file: Optional log file path for file output. Defaults to
            ``settings.log_file``.
    """
    if log_level is None:
        log_level = "DEBUG" if settings.verbose else settings.log_level
    if log_file is None:
        log_file = settings.log_file

    # Remove default handler
    logger.remove()

    logger.add(sys.stderr, level=log_level, format=_CONSOLE_FORMAT, colorize=True)

    if log_file:
        logger.add(
            str(log_file),
            level=log_level,
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention="7 days",
            enqueue=True,
        )

    logger.info("Logging configured: level={}, file={}", log_level, log_file)


def reset_logging() -> None:
    """Drop every sink, including file sinks, and restore a plain stderr sink.

    Flushes enqueued records first so file sinks are complete on disk.
    """
    logger.complete()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format=_CONSOLE_FORMAT)


__all__ = ["reset_logging", "setup_logging"]
