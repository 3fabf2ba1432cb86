"""
Structured logging for unitline.

All lifecycle events (unit start/finish, failures, rollbacks) are emitted
through structlog with dotted event names so they can be filtered and
aggregated:

    unit.start        unit.succeeded     unit.failed     unit.error
    state.failed      state.rollback     state.rollback_error
    organizer.step

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="unitline")
            ↓
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars   ← run_id bound by top-level invocations
          3. add_log_level
          4. add_service_metadata
          5. JSONRenderer  (or ConsoleRenderer when attached to a tty)

Examples:
    >>> from unitline.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.info("unit.start", unit="ChargeCard")

    Scoped context:

    >>> with LogContext(run_id="abc123"):
    ...     logger.info("unit.succeeded")

Tags:
    logging, structlog, observability, unitline-core
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from unitline.core.settings import get_settings

# Service name stamped on every event
_SERVICE_NAME = "unitline"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Arguments left as ``None`` fall back to ``UnitlineSettings``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    settings = get_settings()
    level = (level or settings.log_level).upper()
    _SERVICE_NAME = service or settings.service

    if json_format is None:
        json_format = settings.log_json
    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Values bound on entry are restored to their previous state on exit, so
    nested scopes binding the same key do not clobber the outer one.

    Example:
        with LogContext(run_id="abc123"):
            logger.info("unit.start")
        # run_id no longer bound here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
