"""Structured logging setup with structlog.

Call configure_logging() once at process start. Development gets a colored
console renderer; every other environment gets one JSON object per line.
Request-scoped fields (request_id) come in through contextvars.
"""

import logging

import structlog
from structlog.typing import Processor


def configure_logging(environment: str = "development", level: str = "INFO") -> None:
    """Configure structlog processors for the given environment."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if environment == "development":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
