"""OpenTelemetry tracing for remote credential and upload calls.

Spans cover the HTTP round-trips made by
:class:`~lumina.auth.cloud.CredentialAuthority`.  Set ``tracing.console``
(or ``OTEL_TRACES_CONSOLE=1``) to print spans while developing; set
``OTEL_EXPORTER_OTLP_ENDPOINT`` to ship them elsewhere.
"""

from __future__ import annotations

import atexit
import os
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

_tracer: trace.Tracer | None = None


def setup_tracing(service_name: str = "lumina", console: bool = False) -> None:
    """Install a tracer provider for this process."""
    global _tracer

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if console or os.getenv("OTEL_TRACES_CONSOLE", "").lower() in ("1", "true"):
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    else:
        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        if otlp_endpoint:
            try:
                from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

                provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
            except ImportError:
                provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    atexit.register(provider.shutdown)


def get_tracer() -> trace.Tracer:
    """Return the configured tracer, or a no-op tracer before setup."""
    return _tracer or trace.get_tracer("lumina")


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
):
    """Wrap an async function in a span.

    Boolean results are recorded as ``lumina.result`` so failed checks
    and verifications are visible even though they do not raise.

    Usage::

        @traced("lumina.cloud.auth_check", attributes={"lumina.action": "auth-check"})
        async def exists(self) -> bool:
            ...
    """

    def decorator(func):
        span_name = name or f"{func.__module__}.{func.__qualname__}"

        @wraps(func)
        async def wrapper(*args, **kwargs):
            with get_tracer().start_as_current_span(span_name) as span:
                for key, value in (attributes or {}).items():
                    span.set_attribute(key, value)
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    span.set_attribute("error", True)
                    span.set_attribute("error.message", str(exc))
                    raise
                if isinstance(result, bool):
                    span.set_attribute("lumina.result", result)
                return result

        return wrapper

    return decorator
