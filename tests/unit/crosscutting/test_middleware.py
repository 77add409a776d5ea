"""
Name: HTTP Middleware Tests

Responsibilities:
  - X-Request-Id acceptance/generation
  - Body limit by Content-Length and by streamed body
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from usermgmt.crosscutting.middleware import (
    MAX_REQUEST_ID_LENGTH,
    BodyLimitMiddleware,
    RequestContextMiddleware,
    resolve_request_id,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("raw", [None, "", "   ", "x" * (MAX_REQUEST_ID_LENGTH + 1)])
def test_unusable_request_id_is_replaced(raw):
    generated = resolve_request_id(raw)

    assert generated != raw
    assert len(generated) == 36


def test_request_id_is_trimmed_and_kept():
    assert resolve_request_id("  abc-1  ") == "abc-1"


@pytest.fixture
def limited_client() -> TestClient:
    app = FastAPI()
    app.add_middleware(BodyLimitMiddleware, max_body_bytes=10)
    app.add_middleware(RequestContextMiddleware)

    @app.post("/echo")
    async def echo(request: Request):
        body = await request.body()
        return {"size": len(body), "request_id": request.state.request_id}

    return TestClient(app)


def test_body_within_limit_passes(limited_client):
    resp = limited_client.post("/echo", content=b"0123456789")

    assert resp.status_code == 200
    assert resp.json()["size"] == 10
    assert resp.headers["X-Request-Id"] == resp.json()["request_id"]


def test_declared_length_over_limit_is_413(limited_client):
    resp = limited_client.post(
        "/echo", content=b"x" * 11, headers={"X-Request-Id": "big-1"}
    )

    assert resp.status_code == 413
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "PAYLOAD_TOO_LARGE"
    assert resp.json()["errors"] == [{"request_id": "big-1"}]


def test_streamed_body_over_limit_is_413(limited_client):
    def chunks():
        yield b"x" * 6
        yield b"x" * 6

    resp = limited_client.post("/echo", content=chunks())

    assert resp.status_code == 413
    assert "Maximum allowed: 10 bytes" in resp.json()["detail"]
    assert resp.json()["errors"] == [{"request_id": resp.headers["X-Request-Id"]}]
