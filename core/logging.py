"""
Structured logging configuration using structlog.

Console output in development, JSON lines in production. Request-scoped
keys (study case, tariff line) are bound through contextvars with
``bound_context`` so every line logged during an operation carries them.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import Processor

    from core.config import LoggingSettings


def configure_logging(
    *,
    json_format: bool = False,
    log_level: str = "INFO",
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_format: Use JSON format instead of console format.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    level = logging.getLevelName(log_level.upper())
    # Common processors for all environments
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    renderer: list[Processor]
    if json_format:
        # Production: JSON format for log aggregation
        renderer = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        # Development: console output, colored on a terminal
        renderer = [
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]

    structlog.configure(
        processors=[*shared_processors, *renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging to use the same stream
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def configure_from_settings(settings: LoggingSettings) -> None:
    """Configure logging from the ``LOG_`` settings section."""
    configure_logging(json_format=settings.json_format, log_level=settings.level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__).
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def bound_context(**kwargs: object) -> Iterator[None]:
    """
    Bind key-value pairs for the duration of a block.

    Keys bound before the block are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
