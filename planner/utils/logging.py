"""Structured logging configuration.

Configures structlog once at start-up. Modules obtain loggers with
``structlog.get_logger(__name__)`` and log snake_case events with keyword
context:

    log.info("note_created", user_id=user_id, note_id=note.id)

Output is JSON by default (for log aggregation) or a human-readable console
format when LOG_FORMAT=console.
"""

import logging
import sys

import structlog

from planner.config import get_log_format, get_log_level


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure stdlib logging and structlog processors.

    Args:
        level: Log level name; defaults to LOG_LEVEL.
        fmt: "json" or "console"; defaults to LOG_FORMAT.
    """
    level_name = (level or get_log_level()).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    renderer: structlog.typing.Processor
    if (fmt or get_log_format()) == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )

