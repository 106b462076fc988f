"""Test middleware functionality."""

from http import HTTPStatus
from types import SimpleNamespace

from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from textrazor_fastapi.app import middleware
from textrazor_fastapi.app.middleware import RateLimiterMiddleware


def limited_app(**limits) -> FastAPI:
    app = FastAPI()

    @app.get("/limited")
    async def limited():
        return {"message": "limited"}

    @app.get("/free")
    async def free():
        return {"message": "free"}

    app.add_middleware(RateLimiterMiddleware, limited_paths=["/limited"], **limits)
    return app


def test_security_headers(client: TestClient) -> None:
    for endpoint in ["/api/v1/", "/api/v1/health", "/api/v1/metrics"]:
        response = client.get(endpoint)
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" in response.headers
        assert "script-src" in response.headers["Content-Security-Policy"]
        assert "Referrer-Policy" in response.headers


def test_rate_limit_headers_on_provider_routes(client: TestClient) -> None:
    response = client.post("/api/v1/analyze", json={"text": "hello"})

    assert response.status_code == HTTPStatus.OK
    assert response.headers["X-RateLimit-Limit"] == "60"
    assert response.headers["X-RateLimit-Remaining"] == "59"


def test_rate_limit_ignores_other_routes(client: TestClient) -> None:
    response = client.get("/api/v1/health")

    assert "X-RateLimit-Limit" not in response.headers


def test_requests_over_the_limit_are_rejected() -> None:
    with TestClient(limited_app(requests_per_minute=2, burst_limit=10)) as client:
        statuses = [client.get("/limited").status_code for _ in range(3)]
        free = client.get("/free")

    assert statuses == [HTTPStatus.OK, HTTPStatus.OK, HTTPStatus.TOO_MANY_REQUESTS]
    assert free.status_code == HTTPStatus.OK


def test_burst_blocks_client() -> None:
    with TestClient(
        limited_app(requests_per_minute=1, burst_limit=3, block_duration=120)
    ) as client:
        responses = [client.get("/limited") for _ in range(5)]

    assert [r.status_code for r in responses] == [
        HTTPStatus.OK,
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.TOO_MANY_REQUESTS,
    ]
    assert responses[3].json()["detail"] == "Too many requests - client blocked"
    assert responses[3].json()["retry_after"] == 120
    assert responses[4].json()["detail"] == "Client blocked due to rate limit violation"
    assert "Retry-After" in responses[4].headers


def limited_request(host: str) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/limited",
            "headers": [],
            "query_string": b"",
            "client": (host, 50000),
        }
    )


async def respond_ok(request: Request) -> Response:
    return Response("ok")


async def test_idle_clients_are_forgotten(monkeypatch) -> None:
    clock = [1000.0]
    monkeypatch.setattr(middleware, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    limiter = RateLimiterMiddleware(
        None, limited_paths=["/limited"], requests_per_minute=5, burst_limit=10
    )

    await limiter.dispatch(limited_request("10.0.0.1"), respond_ok)
    await limiter.dispatch(limited_request("10.0.0.2"), respond_ok)
    assert set(limiter._requests) == {"10.0.0.1", "10.0.0.2"}

    clock[0] += 61
    await limiter.dispatch(limited_request("10.0.0.3"), respond_ok)

    assert set(limiter._requests) == {"10.0.0.3"}


async def test_blocked_client_state_is_released(monkeypatch) -> None:
    clock = [1000.0]
    monkeypatch.setattr(middleware, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    limiter = RateLimiterMiddleware(
        None,
        limited_paths=["/limited"],
        requests_per_minute=1,
        burst_limit=1,
        block_duration=120,
    )

    await limiter.dispatch(limited_request("10.0.0.1"), respond_ok)
    blocked = await limiter.dispatch(limited_request("10.0.0.1"), respond_ok)
    assert blocked.status_code == HTTPStatus.TOO_MANY_REQUESTS
    assert "10.0.0.1" not in limiter._requests
    assert "10.0.0.1" in limiter._blocked_until

    clock[0] += 181
    await limiter.dispatch(limited_request("10.0.0.2"), respond_ok)

    assert "10.0.0.1" not in limiter._blocked_until
    assert set(limiter._requests) == {"10.0.0.2"}
