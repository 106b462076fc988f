"""Custom middleware for the application."""

import asyncio
import logging
import time
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every HTTP response.

    Batch responses carry HTML fragments meant to be embedded by a client,
    so responses themselves must never be framed or sniffed as HTML.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        # Swagger UI loads its assets from cdn.jsdelivr.net
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' https://cdn.jsdelivr.net 'unsafe-inline'; "
            "style-src 'self' https://cdn.jsdelivr.net; "
            "img-src 'self' data: https://fastapi.tiangolo.com; "
            "connect-src 'self';"
        )
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RateLimiterMiddleware(BaseHTTPMiddleware):
    """Per-client rate limiting of the routes that call TextRazor.

    Every request on a limited path spends upstream quota, so only those
    paths are counted. A client exceeding ``burst_limit`` requests within a
    minute is blocked for ``block_duration`` seconds.

    Attributes:
        limited_paths: Request paths subject to the limit.
        requests_per_minute: Allowed requests per minute.
        burst_limit: Requests per minute that trigger a block.
        block_duration: Duration in seconds of a block.
    """

    def __init__(
        self,
        app: Any,
        limited_paths: Iterable[str] = (),
        requests_per_minute: int = 60,
        burst_limit: int = 100,
        block_duration: int = 300,
    ) -> None:
        super().__init__(app)
        self.limited_paths = set(limited_paths)
        self.requests_per_minute = requests_per_minute
        self.burst_limit = burst_limit
        self.block_duration = block_duration
        self._requests: dict[str, deque[float]] = defaultdict(deque)
        self._blocked_until: dict[str, float] = {}
        self._last_sweep = time.monotonic()
        self._lock = asyncio.Lock()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path not in self.limited_paths:
            return await call_next(request)

        client = request.client.host if request.client else "unknown_client"
        now = time.monotonic()

        async with self._lock:
            self._sweep(now)
            blocked_until = self._blocked_until.get(client)
            if blocked_until is not None:
                if now < blocked_until:
                    return self._too_many(
                        "Client blocked due to rate limit violation",
                        int(blocked_until - now) + 1,
                    )
                del self._blocked_until[client]

            window = self._requests[client]
            while window and now - window[0] >= WINDOW_SECONDS:
                window.popleft()

            # Rejected attempts count too, so hammering leads to a block.
            window.append(now)

            if len(window) > self.burst_limit:
                self._blocked_until[client] = now + self.block_duration
                del self._requests[client]
                logger.warning("Client %s blocked for burst limit violation", client)
                return self._too_many("Too many requests - client blocked", self.block_duration)

            if len(window) > self.requests_per_minute:
                return self._too_many(
                    "Too many requests", int(WINDOW_SECONDS - (now - window[0])) + 1
                )

            remaining = self.requests_per_minute - len(window)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    def _sweep(self, now: float) -> None:
        """Forget clients with no request in the last window and expired blocks."""
        if now - self._last_sweep < WINDOW_SECONDS:
            return
        self._last_sweep = now
        idle = [
            client
            for client, window in self._requests.items()
            if not window or now - window[-1] >= WINDOW_SECONDS
        ]
        for client in idle:
            del self._requests[client]
        expired = [
            client for client, until in self._blocked_until.items() if now >= until
        ]
        for client in expired:
            del self._blocked_until[client]

    @staticmethod
    def _too_many(detail: str, retry_after: int) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": detail, "retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
