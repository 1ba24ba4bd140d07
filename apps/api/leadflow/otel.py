from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import Span, Status, StatusCode

from leadflow.context import get_correlation_id, route_var
from leadflow.core.config import Settings, get_settings

COMMAND_SPAN_PREFIX = "leadflow."

_provider: TracerProvider | None = None
_exporters_attached = False

tracer = trace.get_tracer("leadflow.commands")


def _service_name(settings: Settings) -> str:
    return settings.app_name.lower()


def _get_or_create_provider(service_name: str) -> TracerProvider:
    global _provider

    if _provider is not None:
        return _provider

    resource = Resource.create({"service.name": service_name, "deployment.environment": get_settings().app_env})
    _provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(_provider)
    return _provider


def setup_otel(settings: Settings | None = None) -> TracerProvider | None:
    """Export command and request spans when ``OTEL_ENABLED`` is set.

    Spans go to ``OTEL_EXPORTER_OTLP_ENDPOINT`` when given, and to the console
    when ``OTEL_CONSOLE_EXPORTER=true``.
    """
    global _exporters_attached

    settings = settings or get_settings()
    if not settings.otel_enabled:
        return None

    provider = _get_or_create_provider(_service_name(settings))
    if _exporters_attached:
        return provider

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    if os.getenv("OTEL_CONSOLE_EXPORTER", "false").lower() == "true":
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    _exporters_attached = True
    return provider


def setup_inmemory_otel(service_name: str = "leadflow") -> InMemorySpanExporter:
    provider = _get_or_create_provider(service_name)
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


def command_span_name(command: str) -> str:
    return f"{COMMAND_SPAN_PREFIX}{command}"


@contextmanager
def command_span(command: str) -> Iterator[Span]:
    """Run one workflow command inside ``leadflow.<command>``.

    The span carries the bound correlation id and route. A raised error is
    recorded on the span and marks it ERROR before propagating.
    """
    with tracer.start_as_current_span(command_span_name(command), record_exception=False) as span:
        span.set_attribute("command", command)
        correlation_id = get_correlation_id()
        if correlation_id:
            span.set_attribute("correlation_id", correlation_id)
        route = route_var.get()
        if route:
            span.set_attribute("leadflow.route", route)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
