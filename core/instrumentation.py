"""
OpenTelemetry instrumentation setup.

This module configures OpenTelemetry tracing and the Prometheus
metrics endpoint. Setup is skipped unless OTEL_ENABLED is true; the
API's tracers are then no-op.
"""

import logging
import os
import socket

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.instrumentation.psycopg2 import Psycopg2Instrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode  # noqa: F401  pylint: disable=unused-import
from prometheus_client import start_http_server

logger = logging.getLogger(__name__)


def is_enabled() -> bool:
    return os.environ.get("OTEL_ENABLED", "false").lower() == "true"


def setup_opentelemetry() -> bool:
    """
    Configure OpenTelemetry instrumentation.

    Sets up:
    - Distributed tracing (exported via OTLP)
    - Auto-instrumentation for Django and PostgreSQL
    - The Prometheus metrics server

    Returns:
        True if instrumentation was configured
    """
    if not is_enabled():
        logger.debug("OTEL_ENABLED is not set, skipping instrumentation setup")
        return False

    resource = Resource.create(
        {
            "service.name": os.environ.get("OTEL_SERVICE_NAME", "license-activation-service"),
            "service.version": os.environ.get("OTEL_SERVICE_VERSION", "1.0.0"),
            "deployment.environment": os.environ.get("ENVIRONMENT", "development"),
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(trace_provider)

    otlp_endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "http://tempo:4317")
    otlp_exporter = OTLPSpanExporter(
        endpoint=otlp_endpoint,
        insecure=os.environ.get("OTEL_EXPORTER_OTLP_INSECURE", "true").lower() == "true",
    )
    trace_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    DjangoInstrumentor().instrument()
    Psycopg2Instrumentor().instrument()

    start_metrics_server(int(os.environ.get("PROMETHEUS_PORT", "9090")))

    logger.info("OpenTelemetry instrumentation configured")
    return True


def start_metrics_server(port: int) -> None:
    """Start the Prometheus metrics server unless the port is taken."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        in_use = sock.connect_ex(("127.0.0.1", port)) == 0
        sock.close()

        if in_use:
            logger.info("Prometheus metrics server already running on port %s", port)
            return
        start_http_server(port, addr="0.0.0.0")
        logger.info("Prometheus metrics server started on 0.0.0.0:%s", port)
    except OSError as e:
        logger.warning("Could not start Prometheus metrics server: %s", e)


def get_tracer(name: str):
    """
    Get a tracer instance for manual instrumentation.

    Args:
        name: Tracer name (usually module name)

    Returns:
        Tracer instance
    """
    return trace.get_tracer(name)
