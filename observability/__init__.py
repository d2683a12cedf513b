"""
Mirathi - Observability Package

Structured logging (structlog) with trace context, and OpenTelemetry
tracing around statutory policy evaluations.

Usage:
    from observability import setup_observability, get_logger

    setup_observability()
    logger = get_logger(__name__)
"""
from typing import Optional

from config import Config, get_config
from observability.logging import (
    DomainLogger,
    LogContext,
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from observability.tracing import (
    create_span,
    get_tracer,
    setup_tracing,
    shutdown_tracing,
    span_decorator,
)


def setup_observability(config: Optional[Config] = None) -> None:
    """Configure logging and tracing from ``config`` (defaults to ``get_config()``)."""
    config = config or get_config()
    setup_tracing(config.observability)
    setup_logging(config.logging)


def shutdown_observability() -> None:
    """Flush and shut down tracing and logging."""
    shutdown_tracing()
    shutdown_logging()


__all__ = [
    "setup_observability",
    "shutdown_observability",
    # Tracing
    "setup_tracing",
    "shutdown_tracing",
    "get_tracer",
    "create_span",
    "span_decorator",
    # Logging
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "LogContext",
    "bind_context",
    "clear_context",
    "DomainLogger",
]
