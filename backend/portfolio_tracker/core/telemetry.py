"""OpenTelemetry helpers for the portfolio tracker API."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from ..config import TrackerSettings

logger = logging.getLogger(__name__)

_TELEMETRY_INITIALISED = False


def _build_resource(settings: TrackerSettings) -> Resource:
    attributes: dict[str, Any] = {
        "service.name": settings.telemetry_service_name or settings.app_name,
        "service.namespace": "portfolio-tracker",
    }
    return Resource.create(attributes)


def _exporter_options(settings: TrackerSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def setup_telemetry(app: FastAPI, settings: TrackerSettings, engine: AsyncEngine | None = None) -> bool:
    """Configure tracing exporters once for the process.

    Returns ``True`` when telemetry is active after the call.
    """

    global _TELEMETRY_INITIALISED  # noqa: PLW0603

    if _TELEMETRY_INITIALISED:
        return True

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    resource = _build_resource(settings)
    sampler = ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio))

    tracer_provider = TracerProvider(resource=resource, sampler=sampler)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**_exporter_options(settings))))
    trace.set_tracer_provider(tracer_provider)

    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=tracer_provider)

    _TELEMETRY_INITIALISED = True
    logger.info("Telemetry initialised")
    return True


tracer = trace.get_tracer("portfolio_tracker")


__all__ = ["setup_telemetry", "tracer"]
