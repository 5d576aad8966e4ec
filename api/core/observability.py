"""OpenTelemetry provider setup.

Called once from ``main.py`` before the app is built. Tracing is enabled
only when ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set; spans are then exported over
OTLP gRPC (e.g. to a local collector on ``http://localhost:4317``). Without
it, the OTel API stays on its no-op providers and nothing here is imported.
"""

from __future__ import annotations

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

# Set by configure_observability(); checked by telemetry and logging helpers
_telemetry_enabled: bool = False


def is_telemetry_enabled() -> bool:
    """Return whether OTel providers are active."""
    return _telemetry_enabled


def configure_observability() -> None:
    """Install the tracer provider if an OTLP endpoint is configured."""
    global _telemetry_enabled  # noqa: PLW0603

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint or _telemetry_enabled:
        return

    _configure_otlp(endpoint)
    _telemetry_enabled = True


def instrument_app(app: Any) -> None:
    """Instrument a FastAPI app instance for HTTP server spans."""
    if not _telemetry_enabled:
        return

    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(app)
    logger.info("telemetry.fastapi.instrumented")


def instrument_sqlalchemy_engine(engine: Any) -> None:
    """Add OpenTelemetry instrumentation for SQLAlchemy query tracing."""
    if not _telemetry_enabled:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    SQLAlchemyInstrumentor().instrument(
        engine=engine.sync_engine,
        enable_commenter=True,
    )
    logger.info("telemetry.sqlalchemy.instrumented")


def _configure_otlp(endpoint: str) -> None:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    insecure = endpoint.startswith("http://")
    service_name = os.getenv("OTEL_SERVICE_NAME", "series-catalog-api")
    resource = Resource.create({SERVICE_NAME: service_name})

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=insecure))
    )
    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "telemetry.otlp.configured",
        extra={"endpoint": endpoint, "service": service_name},
    )
