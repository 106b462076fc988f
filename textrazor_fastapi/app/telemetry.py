"""OpenTelemetry configuration and utilities."""

import logging
import socket
import uuid
from functools import wraps
from typing import Any, Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace.status import Status, StatusCode

from textrazor_fastapi.app.config import settings

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_tracer_provider: Optional[TracerProvider] = None
_span_processors: list[BatchSpanProcessor] = []
_is_setup_complete = False


def _enrich_span_with_request_details(span: trace.Span, scope: dict[str, Any]) -> None:
    """Add a correlation id to request spans."""
    if not span or not span.is_recording():
        return
    span.set_attribute("app.request_id", str(uuid.uuid4()))


def _is_collector_available(host: str, port: int, timeout: float = 0.5) -> bool:
    """Check if the OpenTelemetry collector accepts connections."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def _build_exporter() -> SpanExporter:
    """Pick the OTLP exporter when a collector answers, else the console."""
    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT.strip()
    if not endpoint:
        logger.info("OTLP endpoint not configured. Using console exporter.")
        return ConsoleSpanExporter()

    host, _, port = endpoint.replace("http://", "").replace("https://", "").partition(":")
    collector_port = int(port) if port else 4317
    if not _is_collector_available(host, collector_port):
        logger.warning(
            "OTLP collector not available at %s:%d. Using console exporter.",
            host,
            collector_port,
        )
        return ConsoleSpanExporter()

    logger.info("OTLP collector is available at %s:%d", host, collector_port)
    return OTLPSpanExporter(endpoint=endpoint, insecure=not settings.OTLP_SECURE, timeout=3)


def shutdown_telemetry() -> None:
    """Flush and shut down span processors created by :func:`setup_telemetry`."""
    global _tracer_provider, _is_setup_complete

    if not _is_setup_complete:
        return

    logger.info("Shutting down OpenTelemetry components...")
    for processor in _span_processors:
        try:
            processor.shutdown()
        except Exception as e:
            logger.warning("Error shutting down span processor: %s", e)

    _span_processors.clear()
    _tracer_provider = None
    _is_setup_complete = False
    logger.info("OpenTelemetry shutdown completed")


def setup_telemetry(app: FastAPI) -> None:
    """Set up OpenTelemetry tracing for the FastAPI application."""
    global _tracer_provider, _is_setup_complete

    if not settings.OTEL_ENABLED:
        logger.info("OpenTelemetry instrumentation is disabled")
        return

    if _is_setup_complete:
        logger.debug("OpenTelemetry already configured, skipping setup")
        return

    if hasattr(trace.get_tracer_provider(), "add_span_processor"):
        logger.warning(
            "TracerProvider already exists, skipping telemetry setup to avoid conflicts"
        )
        return

    try:
        resource = Resource.create(
            {
                ResourceAttributes.SERVICE_NAME: settings.OTEL_SERVICE_NAME,
                ResourceAttributes.SERVICE_VERSION: settings.API_VERSION,
            }
        )
        _tracer_provider = TracerProvider(
            resource=resource,
            sampler=ParentBased(root=TraceIdRatioBased(settings.OTEL_TRACES_SAMPLER_ARG)),
        )
        trace.set_tracer_provider(_tracer_provider)

        processor = BatchSpanProcessor(_build_exporter())
        _tracer_provider.add_span_processor(processor)
        _span_processors.append(processor)

        FastAPIInstrumentor.instrument_app(
            app,
            excluded_urls=settings.OTEL_PYTHON_FASTAPI_EXCLUDED_URLS,
            server_request_hook=_enrich_span_with_request_details,
        )

        _is_setup_complete = True
        logger.info("OpenTelemetry instrumentation configured successfully")

    except Exception as e:
        logger.error("Failed to configure OpenTelemetry: %s", str(e))
        logger.exception(e)


def trace_method(name=None):
    """Decorator to add OpenTelemetry tracing to an async function or method."""

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.OTEL_ENABLED:
                return await func(*args, **kwargs)

            tracer = trace.get_tracer(__name__)
            with tracer.start_as_current_span(name or func.__name__) as span:
                try:
                    span.set_attribute("function.name", func.__name__)
                    result = await func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

        return wrapper

    return decorator
