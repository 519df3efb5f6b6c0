"""Structured logging for graphweave.

Every module logs through structlog with ``get_logger(__name__)``. The
library stays silent until the host application calls ``setup_logging``,
which renders events as colored console lines in development and as JSON
otherwise, routed through the ``graphweave`` standard library logger.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from graphweave.config import get_settings

LOGGER_NAME = "graphweave"


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structured logging for graphweave.

    Args:
        level: Log level name; defaults to AppSettings.log_level.
        json_logs: Render JSON lines; defaults to True in production.
    """
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.app.is_production
    log_level = getattr(logging, level or settings.app.log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(log_level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name, normally the calling module's ``__name__``.

    Returns:
        A bound structlog logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Added nodes", graph_id="g0", count=10)
    """
    return structlog.get_logger(name)


class LogContext:
    """Context manager adding fields to every log event inside the block.

    Example:
        >>> with LogContext(graph_id="g0", operation="load"):
        ...     graph = persistence.load_json("snapshot.json")
    """

    def __init__(self, **context: Any) -> None:
        self.context = context

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def bind_context(**context: Any) -> None:
    """Bind fields to all subsequent log events of the current context."""
    structlog.contextvars.bind_contextvars(**context)


def unbind_context(*keys: str) -> None:
    """Remove fields from the log context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
