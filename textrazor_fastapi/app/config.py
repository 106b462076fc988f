"""Application configuration management."""

import logging
from functools import lru_cache
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings managed via Pydantic BaseSettings.

    Attributes:
        API_VERSION: The version of the API.
        OTEL_ENABLED: Whether OpenTelemetry instrumentation is enabled.
        OTEL_SERVICE_NAME: The service name for OpenTelemetry.
        OTEL_EXPORTER_OTLP_ENDPOINT: The OTLP endpoint for OpenTelemetry.
        OTEL_TRACES_SAMPLER_ARG: The sampling rate for traces.
        OTEL_PYTHON_FASTAPI_EXCLUDED_URLS: URLs to exclude from tracing.
        OTLP_SECURE: Whether to use a secure connection for OTLP.
        PROMETHEUS_MONITORED_PATHS: Comma-separated route suffixes to collect
            HTTP metrics for.
        REQUESTS_PER_MINUTE: Allowed requests per minute on routes that forward
            to the annotation provider.
        BURST_LIMIT: Burst limit for rate limiting.
        BLOCK_DURATION: Duration in seconds to block clients exceeding limits.
        LOG_LEVEL: The logging level for the application.
        SERVER_HOST: The host address for the server.
        SERVER_PORT: The port number for the server.
        TEXTRAZOR_API_KEY: Credential sent to TextRazor. Held by the server only.
        TEXTRAZOR_API_URL: The TextRazor endpoint.
        TEXTRAZOR_EXTRACTORS: Extractors requested from TextRazor.
        PROVIDER_TIMEOUT: Timeout in seconds for a single upstream request.
        PROVIDER_MAX_RETRIES: Retries of a failed upstream request.
        PROVIDER_RETRY_DELAY: Delay in seconds before a retry.
        MAX_TEXT_LENGTH: Maximum allowed text length for analysis.
        ALLOWED_ORIGINS: Comma-separated string of allowed CORS origins.
    """

    # API Version
    API_VERSION: str = "v1"

    # OpenTelemetry Configuration
    OTEL_ENABLED: bool = True
    OTEL_SERVICE_NAME: str = "textrazor-fastapi"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"
    OTEL_TRACES_SAMPLER_ARG: float = 1.0
    OTEL_PYTHON_FASTAPI_EXCLUDED_URLS: str = "health,metrics"
    OTLP_SECURE: bool = False

    # Prometheus
    PROMETHEUS_MONITORED_PATHS: str = "analyze,analyze/batch"

    # Rate Limiting Settings
    REQUESTS_PER_MINUTE: int = 60
    BURST_LIMIT: int = 100
    BLOCK_DURATION: int = 300

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Annotation provider
    TEXTRAZOR_API_KEY: str | None = None
    TEXTRAZOR_API_URL: str = "https://api.textrazor.com/"
    TEXTRAZOR_EXTRACTORS: str = "entities"
    PROVIDER_TIMEOUT: float = 30.0
    PROVIDER_MAX_RETRIES: int = Field(1, ge=0, le=1)
    PROVIDER_RETRY_DELAY: float = 1.0

    MAX_TEXT_LENGTH: int = 102400
    ALLOWED_ORIGINS: str = ""

    @model_validator(mode="before")
    @classmethod
    def _strip_inline_comments(cls, data: Any) -> Any:
        if isinstance(data, dict):
            cleaned_data = {}
            for key, value in data.items():
                if isinstance(value, str):
                    cleaned_data[key] = value.split("#")[0].strip()
                else:
                    cleaned_data[key] = value
            return cleaned_data
        return data

    @property
    def cors_origins(self) -> list[str]:
        """Get the list of allowed CORS origins.

        Returns:
            A list of allowed CORS origins split from the ALLOWED_ORIGINS setting.
            If no origins are configured, returns an empty list.
        """
        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    @property
    def monitored_paths(self) -> list[str]:
        """Full request paths that Prometheus collects HTTP metrics for."""
        return [
            f"/api/{self.API_VERSION}/{suffix.strip()}"
            for suffix in self.PROMETHEUS_MONITORED_PATHS.split(",")
            if suffix.strip()
        ]

    @property
    def provider_configured(self) -> bool:
        """Whether a TextRazor credential is present."""
        return bool(self.TEXTRAZOR_API_KEY and self.TEXTRAZOR_API_KEY.strip())

    @property
    def log_level(self) -> int:
        """Convert the string log level from settings to a logging constant.

        Returns:
            The integer value of the logging level (e.g., logging.INFO,
            logging.DEBUG). Defaults to logging.INFO if the configured
            LOG_LEVEL is invalid.
        """
        return getattr(logging, self.LOG_LEVEL.upper(), logging.INFO)

    class Config:
        """Pydantic configuration class for Settings.

        Attributes:
            env_file (str): The name of the environment file to load (e.g., ".env").
            case_sensitive (bool): Whether environment variable names are case-sensitive.
        """

        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Create and cache a Settings instance.

    Returns:
        A cached instance of the Settings class.
    """
    return Settings()


settings = get_settings()
