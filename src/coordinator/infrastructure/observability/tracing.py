"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
)
from opentelemetry.semconv.resource import ResourceAttributes

from coordinator.config import ObservabilitySettings


def setup_tracing(settings: ObservabilitySettings, console: bool = False) -> bool:
    """Install a tracer provider exporting to the OTLP endpoint.

    Returns False when tracing is disabled; spans then go to the no-op provider.
    """
    if not settings.tracing_enabled:
        return False

    resource = Resource.create({
        ResourceAttributes.SERVICE_NAME: settings.service_name,
        ResourceAttributes.SERVICE_VERSION: "1.0.0",
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
    )
    if console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    return True


def get_tracer(name: str = "coordinator") -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
