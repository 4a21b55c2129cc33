"""
DDLForge Structured Logging

Structured logging using structlog on top of the standard library. Library
modules log through ``logging.getLogger(__name__)``; the CLI configures both
and uses structlog loggers with bound context.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    include_timestamp: bool = True,
) -> None:
    """
    Configure DDLForge logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON logs
        include_timestamp: Include timestamp in logs

    Usage:
        from ddlforge.utils.logging import configure_logging
        configure_logging(level="DEBUG", json_output=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Standard library loggers used by the library modules
    fmt = "%(levelname)s | %(name)s | %(message)s"
    if include_timestamp:
        fmt = "%(asctime)s | " + fmt

    logging.basicConfig(
        format=fmt,
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
        level=log_level,
    )


def get_logger(name: str) -> Any:
    """
    Get a structlog logger.

    Usage:
        logger = get_logger(__name__)
        logger.info("Loaded DDL", plugin="service", actions=3)
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for adding structured context to logs.

    Usage:
        with LogContext(plugin="service", plugin_kind="agent"):
            logger.info("Loading DDL")  # Includes plugin and plugin_kind
    """

    def __init__(self, **context: Any):
        self.context = context

    def __enter__(self) -> "LogContext":
        bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        unbind_contextvars(*self.context.keys())

