"""Test configuration and fixtures."""

from typing import Any, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from textrazor_fastapi.app.main import create_app
from textrazor_fastapi.app.models import AnnotationResult, Entity


class FakeProvider:
    """Annotation provider answering from a table keyed by text.

    A text mapped to an exception raises it; unknown texts yield no entities.
    """

    def __init__(self, responses: dict[str, AnnotationResult | Exception] | None = None):
        self.responses = responses or {}
        self.calls: list[str] = []
        self.last_call_failed = False

    async def annotate(self, text: str) -> AnnotationResult:
        self.calls.append(text)
        outcome = self.responses.get(text, AnnotationResult())
        if isinstance(outcome, Exception):
            self.last_call_failed = True
            raise outcome
        self.last_call_failed = False
        return outcome


@pytest.fixture(autouse=True)
def disable_telemetry(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable OpenTelemetry for all tests.

    This prevents test runs from generating telemetry data and
    attempting to connect to external services.

    Args:
        monkeypatch: pytest's monkeypatch fixture for modifying values.
    """
    from unittest.mock import MagicMock

    from textrazor_fastapi.app import telemetry
    from textrazor_fastapi.app.config import settings

    monkeypatch.setenv("OTEL_ENABLED", "false")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")
    monkeypatch.setattr(settings, "OTEL_ENABLED", False)
    monkeypatch.setattr(telemetry, "setup_telemetry", MagicMock())
    monkeypatch.setattr(telemetry, "shutdown_telemetry", MagicMock())

    telemetry._tracer_provider = None
    telemetry._span_processors.clear()
    telemetry._is_setup_complete = False


@pytest.fixture
def make_entity() -> Callable[..., Entity]:
    """Return a factory building provider entities from the wire field names."""

    def factory(matched_text: str, *types: str, **overrides: Any) -> Entity:
        payload: dict[str, Any] = {
            "entityId": matched_text,
            "type": list(types),
            "confidenceScore": 0.9,
            "matchedText": matched_text,
        }
        payload.update(overrides)
        return Entity.model_validate(payload)

    return factory


@pytest.fixture
def fake_provider(make_entity: Callable[..., Entity]) -> FakeProvider:
    """Provide a fake provider that knows the classic dashboard example."""
    return FakeProvider(
        {
            "George Bush was president of USA.": AnnotationResult(
                entities=[
                    make_entity("George Bush", "Person"),
                    make_entity("USA", "Country"),
                ]
            ),
        }
    )


@pytest.fixture
def client(fake_provider: FakeProvider) -> Iterator[TestClient]:
    """Create a test client whose app uses the fake provider.

    Args:
        fake_provider: The provider placed on the application state.

    Yields:
        TestClient: A test client with lifespan events already run.
    """
    app = create_app()
    with TestClient(app) as test_client:
        app.state.provider = fake_provider
        yield test_client
