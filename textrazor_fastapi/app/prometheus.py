"""Prometheus metrics integration for FastAPI."""

import logging
import time
from typing import Callable

from fastapi import FastAPI
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.responses import Response

from textrazor_fastapi.app.config import settings

logger = logging.getLogger(__name__)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total count of HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)
ERROR_COUNT = Counter(
    "http_errors_total",
    "Total count of HTTP errors",
    ["method", "endpoint", "status_code"],
)
ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of currently active HTTP requests",
    ["method", "endpoint"],
)
ENTITIES_DETECTED = Counter(
    "textrazor_entities_detected_total",
    "Total count of entities detected in processed lines",
    ["entity_type"],
)
LINES_PROCESSED = Counter(
    "textrazor_lines_processed_total",
    "Total count of lines attempted by batch analysis",
    ["outcome"],
)
PROVIDER_CALLS = Counter(
    "textrazor_provider_calls_total",
    "Total count of upstream annotation requests",
    ["outcome"],
)


class PrometheusMiddleware:
    """ASGI middleware collecting request metrics on monitored paths."""

    def __init__(self, app: FastAPI):
        self.app = app
        self.monitored_paths = set(settings.monitored_paths)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["path"] not in self.monitored_paths:
            return await self.app(scope, receive, send)

        path = scope["path"]
        method = scope["method"]
        ACTIVE_REQUESTS.labels(method=method, endpoint=path).inc()
        start = time.perf_counter()

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status_code = message["status"]
                REQUEST_COUNT.labels(
                    method=method, endpoint=path, status_code=status_code
                ).inc()
                if status_code >= 400:
                    ERROR_COUNT.labels(
                        method=method, endpoint=path, status_code=status_code
                    ).inc()
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            ERROR_COUNT.labels(method=method, endpoint=path, status_code=500).inc()
            logger.exception("Error in request: %s", str(e))
            raise
        finally:
            REQUEST_LATENCY.labels(method=method, endpoint=path).observe(
                time.perf_counter() - start
            )
            ACTIVE_REQUESTS.labels(method=method, endpoint=path).dec()


def track_entity(entity_type: str) -> None:
    """Increment the counter for a detected entity's primary type."""
    ENTITIES_DETECTED.labels(entity_type=entity_type).inc()


def track_line(outcome: str) -> None:
    """Record a line attempted by a batch ("success" or "failure")."""
    LINES_PROCESSED.labels(outcome=outcome).inc()


def track_provider_call(outcome: str) -> None:
    """Record one upstream request ("success", "retry" or "failure")."""
    PROVIDER_CALLS.labels(outcome=outcome).inc()


def metrics_endpoint() -> Callable:
    """Create metrics endpoint handler.

    Returns:
        Callable: Starlette endpoint rendering the default registry.
    """

    async def metrics(request):
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    return metrics


def setup_prometheus(app: FastAPI) -> None:
    """Set up Prometheus metrics for FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_route(f"/api/{settings.API_VERSION}/metrics", metrics_endpoint())
    logger.info(
        "Prometheus metrics setup complete. Monitoring paths: %s",
        ", ".join(settings.monitored_paths),
    )
