"""
Mirathi - Tracing with OpenTelemetry

Spans around policy evaluation and aggregate operations so statutory
decisions can be correlated with the request that triggered them.

Usage:
    from observability.tracing import setup_tracing, span_decorator

    setup_tracing()

    @span_decorator("adoption.evaluate", record_result=True)
    def evaluate(context):
        ...

Until ``setup_tracing`` is called the OpenTelemetry API hands out no-op
tracers, so the domain core can be used without any exporter.
"""
from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

from config import ObservabilityConfig, get_config

P = ParamSpec("P")
T = TypeVar("T")

# Global state
_tracer_provider: Optional[TracerProvider] = None


def setup_tracing(config: Optional[ObservabilityConfig] = None) -> Optional[TracerProvider]:
    """
    Install an SDK tracer provider.

    Returns:
        The provider, or ``None`` when tracing is disabled.
    """
    global _tracer_provider

    if _tracer_provider is not None:
        return _tracer_provider

    config = config or get_config().observability
    if not config.tracing_enabled:
        return None

    resource = Resource.create(
        {
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: config.service_version,
            "deployment.environment": config.environment,
            "service.namespace": "mirathi",
        }
    )
    _tracer_provider = TracerProvider(resource=resource)

    if config.trace_console_export:
        _tracer_provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(_tracer_provider)
    return _tracer_provider


def get_tracer(name: str, version: str = "1.0.0") -> trace.Tracer:
    """Get a tracer from the global provider (no-op before setup)."""
    return trace.get_tracer(name, version)


def shutdown_tracing() -> None:
    """Flush pending spans."""
    global _tracer_provider
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
    _tracer_provider = None


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    tracer_name: str = "mirathi.domain",
) -> Iterator[trace.Span]:
    """
    Context manager for creating spans with error recording.

    Example:
        >>> with create_span("member.mark_as_deceased", attributes={"member.id": "m-1"}):
        ...     member.mark_as_deceased(date_of_death)
    """
    tracer = get_tracer(tracer_name)
    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                _set_safe_attribute(span, key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def span_decorator(
    name: Optional[str] = None,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    record_result: bool = False,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for automatic span creation around functions.

    Args:
        name: Span name (defaults to function qualified name)
        kind: Span kind
        attributes: Static attributes to add to all spans
        record_result: Record the return value's ``to_dict()`` as attributes
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            tracer = get_tracer(func.__module__)
            with tracer.start_as_current_span(span_name, kind=kind) as span:
                if attributes:
                    for key, value in attributes.items():
                        span.set_attribute(key, value)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

                if record_result and result is not None:
                    _record_result(span, result)
                return result

        return wrapper

    return decorator


def _record_result(span: trace.Span, result: Any) -> None:
    """Record function result as span attributes."""
    if hasattr(result, "to_dict"):
        for key, value in result.to_dict().items():
            _set_safe_attribute(span, f"result.{key}", value)
    elif isinstance(result, (str, int, float, bool)):
        span.set_attribute("result.value", result)


def _set_safe_attribute(span: trace.Span, key: str, value: Any) -> None:
    """Set span attribute with type coercion."""
    if value is None:
        return

    if isinstance(value, (str, int, float, bool)):
        span.set_attribute(key, value)
    elif isinstance(value, (list, tuple)):
        span.set_attribute(key, [str(v)[:100] for v in value[:10]])
    else:
        span.set_attribute(key, str(value)[:200])
