"""Structured logging for the tracking client.

Everything goes to stderr: the CLI prints its results as JSON on stdout.
"""

import logging
import sys
from typing import Any

import structlog

from usertrack.config import Settings, get_settings


def resolve_log_level(settings: Settings) -> int:
    """``debug`` wins over ``log_level``; unknown names fall back to INFO."""
    if settings.debug:
        return logging.DEBUG
    return logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)


def _renderer(settings: Settings) -> Any:
    if settings.is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger."""
    settings = settings or get_settings()
    log_level = resolve_log_level(settings)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    # httpx logs every request at INFO; keep it out unless debugging
    http_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(http_level)
