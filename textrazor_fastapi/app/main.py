"""Main application module for the TextRazor FastAPI service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from textrazor_fastapi.app import telemetry
from textrazor_fastapi.app.api.routes import router
from textrazor_fastapi.app.config import settings
from textrazor_fastapi.app.exceptions import ProviderConfigurationError
from textrazor_fastapi.app.middleware import RateLimiterMiddleware, SecurityHeadersMiddleware
from textrazor_fastapi.app.prometheus import setup_prometheus
from textrazor_fastapi.app.services.provider import TextRazorClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events."""
    await startup_event(app)
    yield
    await shutdown_event(app)


async def startup_event(app: FastAPI) -> None:
    """Create the annotation provider and set up tracing."""
    logger.info("Application startup")
    telemetry.setup_telemetry(app)

    try:
        app.state.provider = TextRazorClient.from_settings(settings)
        logger.info("TextRazor client initialized for %s", settings.TEXTRAZOR_API_URL)
    except ProviderConfigurationError as e:
        # The service still starts; analysis routes answer 500 until configured.
        app.state.provider = None
        logger.warning("Annotation provider unavailable: %s", e.message)

    logger.info("Application startup complete")


async def shutdown_event(app: FastAPI) -> None:
    """Close the provider's HTTP client and flush traces."""
    logger.info("Application shutdown")
    provider = getattr(app.state, "provider", None)
    if isinstance(provider, TextRazorClient):
        await provider.aclose()
    telemetry.shutdown_telemetry()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(
        title=f"TextRazor Entity API {settings.API_VERSION}",
        description="Line-by-line named entity annotation backed by TextRazor",
        docs_url=f"/api/{settings.API_VERSION}/docs",
        redoc_url=f"/api/{settings.API_VERSION}/redoc",
        openapi_url=f"/api/{settings.API_VERSION}/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        RateLimiterMiddleware,
        limited_paths=settings.monitored_paths,
        requests_per_minute=settings.REQUESTS_PER_MINUTE,
        burst_limit=settings.BURST_LIMIT,
        block_duration=settings.BLOCK_DURATION,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=len(settings.cors_origins) > 0,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )
    setup_prometheus(app)

    app.include_router(router, prefix=f"/api/{settings.API_VERSION}")

    return app


app = create_app()
