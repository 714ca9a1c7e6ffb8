"""HTTP Middleware — verifies request timeout and request context.

Tests:
    - A handler slower than the timeout yields 504 with the error envelope
    - A TimeoutError raised by the handler itself stays a generic 500
    - Fast handlers pass through untouched and carry X-Request-ID
"""

import asyncio

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from userapi.api.error_handlers import register_error_handlers
from userapi.api.middleware import (
    REQUEST_ID_HEADER, RequestContextMiddleware, RequestTimeoutMiddleware,
)


@pytest.fixture
def timed_app():
    app = FastAPI()
    app.add_middleware(RequestTimeoutMiddleware, timeout=0.05)
    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    @app.get("/fast")
    async def fast():
        return {"ok": True}

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(0.5)
        return {"ok": True}

    @app.get("/raises-timeout")
    async def raises_timeout():
        raise asyncio.TimeoutError()

    return app


@pytest.fixture
async def timed_client(timed_app):
    async with AsyncClient(
        transport=ASGITransport(app=timed_app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c


async def test_fast_request_passes_through(timed_client):
    res = await timed_client.get("/fast")
    assert res.status_code == 200
    assert res.json() == {"ok": True}
    assert res.headers[REQUEST_ID_HEADER]


async def test_slow_request_returns_504(timed_client):
    res = await timed_client.get("/slow")
    assert res.status_code == 504
    error = res.json()["error"]
    assert error["code"] == "REQUEST_TIMEOUT"
    assert error["category"] == "timeout"
    assert res.headers[REQUEST_ID_HEADER]


async def test_handler_timeout_error_is_500(timed_client):
    res = await timed_client.get("/raises-timeout")
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "INTERNAL_ERROR"
