"""
Name: Security Headers Tests

Responsibilities:
  - CSP per environment
  - no-store only for /api/ paths
  - HSTS only in production over HTTPS (direct or forwarded)
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from usermgmt.crosscutting.security import (
    HSTS_VALUE,
    SecurityHeadersMiddleware,
    content_security_policy,
    security_headers,
)

pytestmark = pytest.mark.unit


def test_production_csp_is_self_only():
    csp = content_security_policy(is_production=True)

    assert "script-src 'self';" in csp
    assert "frame-ancestors 'none'" in csp
    assert "unsafe-inline" not in csp


def test_development_csp_allows_swagger_assets():
    csp = content_security_policy(is_production=False)

    assert "https://cdn.jsdelivr.net" in csp
    assert "'unsafe-inline'" in csp


@pytest.mark.parametrize(
    "path, cached", [("/api/users", False), ("/docs", True), ("/metrics", True)]
)
def test_no_store_only_under_api(path, cached):
    headers = security_headers(path=path, scheme="http", is_production=False)

    assert ("Cache-Control" not in headers) is cached


@pytest.mark.parametrize(
    "scheme, is_production, expected",
    [
        ("https", True, True),
        ("HTTPS", True, True),
        ("http", True, False),
        ("https", False, False),
    ],
)
def test_hsts_requires_production_and_https(scheme, is_production, expected):
    headers = security_headers(
        path="/api/health", scheme=scheme, is_production=is_production
    )

    assert ("Strict-Transport-Security" in headers) is expected


def _app(is_production: bool) -> TestClient:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)

    @app.get("/api/ping")
    def ping():
        return {"ok": True}

    return TestClient(app)


def test_middleware_honours_forwarded_proto():
    resp = _app(is_production=True).get(
        "/api/ping", headers={"X-Forwarded-Proto": "https"}
    )

    assert resp.headers["Strict-Transport-Security"] == HSTS_VALUE
    assert resp.headers["Cache-Control"] == "no-store"


def test_middleware_plain_http_in_production_has_no_hsts():
    resp = _app(is_production=True).get("/api/ping")

    assert "Strict-Transport-Security" not in resp.headers
    assert resp.headers["X-Frame-Options"] == "DENY"
