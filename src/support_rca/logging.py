"""Structured logging setup utilities."""

import logging
from typing import Any

import structlog


def _level_number(level: str) -> int:
    value = getattr(logging, level.upper(), logging.INFO)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON output for log aggregation."""

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def build_logger(name: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Create a structlog bound logger with default context."""

    logger = structlog.get_logger(name)
    if context:
        return logger.bind(**context)
    return logger
