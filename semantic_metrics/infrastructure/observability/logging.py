"""Structured logging configuration."""

import logging
import sys

import structlog

from semantic_metrics.infrastructure.config.settings import Settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog with JSON (default) or console rendering."""
    level_name = settings.log_level if settings else "INFO"
    render_json = settings.log_json if settings else True
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if render_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
