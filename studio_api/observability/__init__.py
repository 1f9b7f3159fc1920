from studio_api.observability.logging import configure_logging
from studio_api.observability.otel import setup_telemetry

__all__ = ["configure_logging", "setup_telemetry"]
