"""Centralized structlog configuration.

Library modules only call ``structlog.get_logger()``. Entrypoints (the CLI)
call ``configure_logging`` once at startup to set the level filter and the
console renderer.
"""

import logging
import sys
from typing import IO, Optional, Union

import structlog


def _parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = logging.getLevelName(level)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: Union[int, str, None] = "INFO",
    *,
    stream: Optional[IO[str]] = None,
    colors: bool = False,
) -> None:
    """Configure structlog for console output.

    Args:
        level: Minimum level as ``int`` or level name (``"DEBUG"`` etc.).
            Unknown names fall back to INFO.
        stream: Output stream, defaults to ``sys.stderr`` so reports written
            to stdout stay clean.
        colors: Colorize the console renderer.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_parse_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )
