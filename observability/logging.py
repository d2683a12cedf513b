"""
Mirathi - Structured Logging with Trace Context

Integrates structlog with OpenTelemetry trace context so every log line
emitted while a policy or aggregate operation is traced carries the
trace_id and span_id.

Features:
- Structured JSON or console rendering
- Automatic trace context injection (trace_id, span_id)
- Context binding for aggregate/family identifiers
- Specialised logger for aggregate lifecycle and policy verdicts

Usage:
    from observability.logging import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Member created", member_id="m-1", family_id="f-1")
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import structlog
from opentelemetry import trace
from structlog.types import EventDict, WrappedLogger

from config import LoggingConfig, get_config

# Global state
_configured: bool = False


def add_trace_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """
    Structlog processor that adds OpenTelemetry trace context to log events.
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        if ctx.is_valid:
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def add_service_context(
    service_name: str,
    environment: str,
) -> structlog.types.Processor:
    """
    Create a processor that adds service context to all log events.

    Args:
        service_name: Name of the service
        environment: Deployment environment
    """

    def processor(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["service"] = service_name
        event_dict["environment"] = environment
        return event_dict

    return processor


def add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO8601 timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog with OpenTelemetry trace context integration.

    Args:
        config: Logging configuration. Falls back to ``get_config().logging``.
    """
    global _configured

    if _configured:
        return

    app_config = get_config()
    config = config or app_config.logging

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context(
            app_config.observability.service_name,
            app_config.observability.environment,
        ),
        add_timestamp,
    ]

    if config.log_trace_context:
        processors.append(add_trace_context)

    processors.extend(
        [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    if config.json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_stdlib_logging(config)

    _configured = True


def _configure_stdlib_logging(config: LoggingConfig) -> None:
    """Route stdlib logging to stdout at the configured level."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger instance.

    Args:
        name: Logger name, typically ``"mirathi.<component>"``
    """
    if not _configured:
        setup_logging()

    return structlog.get_logger(name)


def shutdown_logging() -> None:
    """Flush handlers and allow ``setup_logging`` to run again."""
    global _configured

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.flush()

    structlog.reset_defaults()
    _configured = False


class LogContext:
    """
    Context manager for adding contextual information to all logs.

    Example:
        >>> with LogContext(family_id="f-1", member_id="m-7"):
        ...     logger.info("Assessing dependency")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def bind_context(**kwargs: Any) -> None:
    """Bind contextual variables to all subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound contextual variables."""
    structlog.contextvars.clear_contextvars()


class DomainLogger:
    """Logger specialised for aggregate lifecycle and statutory decisions."""

    def __init__(self, component: str):
        self._logger = get_logger(f"mirathi.{component}")
        self.component = component

    def created(self, aggregate_id: str, event_types: Iterable[str], **extra: Any) -> None:
        self._logger.info(
            "Aggregate created",
            aggregate_id=aggregate_id,
            events=list(event_types),
            component=self.component,
            **extra,
        )

    def mutated(
        self,
        aggregate_id: str,
        operation: str,
        version: int,
        event_types: Iterable[str],
    ) -> None:
        self._logger.info(
            "Aggregate mutated",
            aggregate_id=aggregate_id,
            operation=operation,
            version=version,
            events=list(event_types),
            component=self.component,
        )

    def rejected(self, aggregate_id: str, operation: str, reason: str) -> None:
        self._logger.warning(
            "Aggregate operation rejected",
            aggregate_id=aggregate_id,
            operation=operation,
            reason=reason,
            component=self.component,
        )

    def verdict(
        self,
        policy: str,
        is_valid: bool,
        check: Optional[str],
        requires_court_discretion: bool,
        **extra: Any,
    ) -> None:
        self._logger.debug(
            "Policy evaluated",
            policy=policy,
            is_valid=is_valid,
            check=check,
            requires_court_discretion=requires_court_discretion,
            component=self.component,
            **extra,
        )
