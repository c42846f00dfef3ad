"""
Telemetry infrastructure for vaultgate.

This module provides a singleton TelemetryService that configures OpenTelemetry
tracing and metrics. The authorization orchestrator records a span per
evaluation and an authz_decisions_total counter through the global providers
set up here; without setup they are no-ops.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from vaultgate_core.config import settings


class TelemetryService:
    """Singleton service for configuring and managing OpenTelemetry."""

    _instance: Optional[TelemetryService] = None

    def __new__(cls) -> TelemetryService:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self.tracer_provider: Optional[TracerProvider] = None
        self.meter_provider: Optional[MeterProvider] = None

    def setup(self) -> None:
        """
        Initialize OpenTelemetry providers.
        Safe to call multiple times (idempotent).
        """
        if not settings.ENABLE_TELEMETRY:
            logger.info("Telemetry disabled via configuration.")
            return

        if self.tracer_provider is not None:
            logger.warning("Telemetry already initialized.")
            return

        resource = Resource.create({
            "service.name": settings.SERVICE_NAME,
            "service.instance.id": settings.OTEL_SERVICE_NAME or "vaultgate-instance",
        })

        # 1. Tracing
        self.tracer_provider = TracerProvider(resource=resource)

        if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
            otlp_exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)
            self.tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
            logger.info(f"OTLP Tracing enabled -> {settings.OTEL_EXPORTER_OTLP_ENDPOINT}")
        else:
            # Console exporter lets traces be checked locally without a collector
            self.tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
            logger.info("OTLP Endpoint not set. Tracing to console (Debug).")

        trace.set_tracer_provider(self.tracer_provider)

        # 2. Metrics, scraped through the Prometheus reader
        reader = PrometheusMetricReader()
        self.meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
        metrics.set_meter_provider(self.meter_provider)

        logger.info("Telemetry initialized successfully.")

    def instrument_app(self, app) -> None:
        """Instrument a FastAPI application and expose /metrics."""
        if not settings.ENABLE_TELEMETRY:
            return

        FastAPIInstrumentor.instrument_app(app, tracer_provider=self.tracer_provider)

        from prometheus_fastapi_instrumentator import Instrumentator
        Instrumentator().instrument(app).expose(app)


# Global helper
def setup_telemetry() -> None:
    TelemetryService().setup()
