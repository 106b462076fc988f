"""Annotation provider adapter for the TextRazor API."""

import asyncio
import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from textrazor_fastapi.app.config import Settings
from textrazor_fastapi.app.exceptions import (
    AnnotationProviderError,
    ProviderConfigurationError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    ProviderValidationError,
)
from textrazor_fastapi.app.models import AnnotationResult, TextRazorResponse
from textrazor_fastapi.app.prometheus import track_provider_call

logger = logging.getLogger(__name__)


class AnnotationProvider(Protocol):
    """Anything that can annotate one text with entities."""

    async def annotate(self, text: str) -> AnnotationResult: ...


class TextRazorClient:
    """Client for TextRazor entity extraction.

    The credential is injected at construction and sent with every request.
    A failed upstream request is retried up to ``max_retries`` times before
    the failure is raised; validation failures are never retried.

    Attributes:
        api_url: TextRazor endpoint.
        extractors: Extractors requested from TextRazor.
        max_retries: Retries of a failed upstream request.
        retry_delay: Delay in seconds before a retry.
        last_call_failed: Whether the most recent ``annotate`` call failed.
    """

    def __init__(
        self,
        api_key: str | None,
        api_url: str = "https://api.textrazor.com/",
        extractors: str = "entities",
        timeout: float = 30.0,
        max_retries: int = 1,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ProviderConfigurationError("TEXTRAZOR_API_KEY not set")

        self.api_url = api_url
        self.extractors = extractors
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.last_call_failed = False
        self._client = httpx.AsyncClient(
            headers={"x-textrazor-key": api_key},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "TextRazorClient":
        return cls(
            api_key=settings.TEXTRAZOR_API_KEY,
            api_url=settings.TEXTRAZOR_API_URL,
            extractors=settings.TEXTRAZOR_EXTRACTORS,
            timeout=settings.PROVIDER_TIMEOUT,
            max_retries=settings.PROVIDER_MAX_RETRIES,
            retry_delay=settings.PROVIDER_RETRY_DELAY,
            transport=transport,
        )

    async def annotate(self, text: str) -> AnnotationResult:
        """Detect entities in ``text``.

        Args:
            text: The text to annotate.

        Returns:
            The detected entities; an absent entity list becomes empty.

        Raises:
            ProviderValidationError: If the text is empty.
            ProviderUnavailableError: If the upstream request still fails
                after the retries.
            ProviderTimeoutError: If the last attempt timed out.
        """
        try:
            result = await self._annotate(text)
        except AnnotationProviderError:
            self.last_call_failed = True
            raise
        self.last_call_failed = False
        return result

    async def _annotate(self, text: str) -> AnnotationResult:
        if not text or not text.strip():
            raise ProviderValidationError("Text is required")

        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                result = await self._request(text)
            except ProviderUnavailableError as e:
                if attempt == attempts - 1:
                    track_provider_call("failure")
                    raise
                track_provider_call("retry")
                logger.warning(
                    "TextRazor request failed (attempt %d/%d): %s",
                    attempt + 1,
                    attempts,
                    e.message,
                )
                await asyncio.sleep(self.retry_delay)
            else:
                track_provider_call("success")
                return result

        raise ProviderUnavailableError("TextRazor request was not attempted")

    async def _request(self, text: str) -> AnnotationResult:
        try:
            response = await self._client.post(
                self.api_url,
                data={"text": text, "extractors": self.extractors},
            )
            response.raise_for_status()
            return TextRazorResponse.model_validate(response.json()).response
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("TextRazor request timed out") from e
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailableError(
                f"TextRazor returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderUnavailableError(f"TextRazor unreachable: {e!s}") from e
        except (ValueError, ValidationError) as e:
            raise ProviderUnavailableError(
                f"TextRazor returned an invalid payload: {e!s}"
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
