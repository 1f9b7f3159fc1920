"""OpenTelemetry setup for observability."""

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from studio_api.config import Settings

logger = structlog.get_logger()


def setup_telemetry(settings: Settings) -> bool:
    """Configure OpenTelemetry tracing when an OTLP endpoint is set.

    Returns:
        True if a tracer provider was installed
    """
    if not settings.otel_exporter_otlp_endpoint:
        logger.debug("OpenTelemetry disabled: no OTLP endpoint")
        return False

    resource = Resource.create(
        {
            "service.name": "studio-api",
            "service.version": settings.app_version,
            "deployment.environment": settings.environment,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    logger.info(
        "OpenTelemetry tracing initialized",
        endpoint=settings.otel_exporter_otlp_endpoint,
    )
    return True
