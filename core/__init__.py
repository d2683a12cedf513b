"""
Mirathi - Core Module

Foundational pieces every other package builds on:
- Unified error hierarchy with OpenTelemetry span recording
- Substitutable clock for deterministic "today"

Usage:
    from core import FixedClock, ValueObjectValidationError

    clock = FixedClock(datetime(2024, 6, 1, tzinfo=timezone.utc))
"""
from core.clock import SYSTEM_CLOCK, Clock, FixedClock, SystemClock
from core.errors import (
    DomainInvariantViolation,
    ErrorContext,
    ErrorSeverity,
    MirathiConfigError,
    MirathiError,
    ValueObjectValidationError,
)

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
    "SYSTEM_CLOCK",
    # Errors
    "ErrorSeverity",
    "ErrorContext",
    "MirathiError",
    "MirathiConfigError",
    "ValueObjectValidationError",
    "DomainInvariantViolation",
]
