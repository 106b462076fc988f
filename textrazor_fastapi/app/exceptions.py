"""Errors raised by the annotation provider adapter.

Every error carries an HTTP-style ``status_code`` so callers can tell a
client-side validation failure (4xx) from an upstream or transport failure
(5xx) without inspecting the message.
"""

from fastapi import status


class AnnotationProviderError(Exception):
    """Base error for a failed annotation request."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class ProviderValidationError(AnnotationProviderError):
    """The text submitted for annotation is empty or missing."""

    status_code = status.HTTP_400_BAD_REQUEST


class ProviderConfigurationError(AnnotationProviderError):
    """The provider credential is not configured."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProviderUnavailableError(AnnotationProviderError):
    """The upstream service failed, was unreachable or answered garbage."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ProviderTimeoutError(ProviderUnavailableError):
    """The upstream service did not answer in time."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
