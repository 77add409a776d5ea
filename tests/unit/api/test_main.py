"""
Name: Application Entry Point Tests

Responsibilities:
  - Health / readiness / metrics endpoints
  - Middleware wiring (security headers, X-Request-Id, body limit)
  - Startup lifespan (dev seed in test env, no pool)
  - OpenAPI security scheme
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from usermgmt.api.main import app
from usermgmt.crosscutting.config import Settings
from usermgmt.crosscutting.exceptions import DatabaseError
from usermgmt.identity.users import UserRole

pytestmark = pytest.mark.unit


@pytest.fixture
def main_client(app_repo) -> TestClient:
    return TestClient(app)


def _metrics_settings(require_auth: bool) -> Settings:
    return Settings(database_url="postgresql://", metrics_require_auth=require_auth)


# ============================================================================
# Health / Ready
# ============================================================================


def test_health(main_client):
    resp = main_client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "message": "Server is running"}


def test_readyz_with_in_memory_store(main_client):
    resp = main_client.get("/readyz")

    assert resp.status_code == 200
    data = resp.json()
    assert data["ok"] is True
    assert data["db"] == "connected"
    assert data["request_id"] == resp.headers["X-Request-Id"]


def test_readyz_reports_db_down(main_client, app_repo):
    with patch.object(app_repo, "ping", side_effect=DatabaseError("down")):
        resp = main_client.get("/readyz")

    assert resp.status_code == 200
    assert resp.json()["ok"] is False
    assert resp.json()["db"] == "disconnected"


# ============================================================================
# Metrics
# ============================================================================


def test_metrics_open_by_default(main_client):
    main_client.get("/api/health")

    resp = main_client.get("/metrics")

    assert resp.status_code == 200
    assert "usermgmt_http_requests_total" in resp.text


def test_metrics_requires_admin_when_enabled(main_client, api_user, auth_headers):
    admin = api_user(UserRole.ADMIN)
    manager = api_user(UserRole.MANAGER)

    with patch(
        "usermgmt.identity.auth_users.get_settings",
        return_value=_metrics_settings(True),
    ):
        anonymous = main_client.get("/metrics")
        as_manager = main_client.get("/metrics", headers=auth_headers(manager))
        as_admin = main_client.get("/metrics", headers=auth_headers(admin))

    assert anonymous.status_code == 401
    assert as_manager.status_code == 403
    assert as_admin.status_code == 200


# ============================================================================
# Middleware
# ============================================================================


def test_security_headers_on_api_responses(main_client):
    resp = main_client.get("/api/health")

    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "default-src 'self'" in resp.headers["Content-Security-Policy"]
    assert resp.headers["Cache-Control"] == "no-store"
    assert "Strict-Transport-Security" not in resp.headers


def test_request_id_is_echoed_or_generated(main_client):
    echoed = main_client.get("/api/health", headers={"X-Request-Id": "req-123"})
    generated = main_client.get("/api/health")

    assert echoed.headers["X-Request-Id"] == "req-123"
    assert len(generated.headers["X-Request-Id"]) == 36


def test_oversized_body_is_413(main_client):
    too_big = b"x" * (1024 * 1024 + 1)

    resp = main_client.post(
        "/api/auth/login",
        content=too_big,
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 413
    assert resp.json()["code"] == "PAYLOAD_TOO_LARGE"


def test_cors_preflight_allows_configured_origin(main_client):
    resp = main_client.options(
        "/api/users",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "PUT",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"


# ============================================================================
# Lifespan / OpenAPI
# ============================================================================


def test_lifespan_seeds_demo_users_in_test_env(app_repo):
    settings = Settings(
        database_url="postgresql://", app_env="test", dev_seed_users=True
    )

    with patch("usermgmt.api.main.get_settings", return_value=settings), patch(
        "usermgmt.api.main.init_pool"
    ) as init_pool:
        with TestClient(app):
            pass

    init_pool.assert_not_called()
    assert {u.email for u in app_repo.list_users()} == {
        "admin@example.com",
        "manager@example.com",
        "user@example.com",
    }


def test_openapi_declares_bearer_and_public_paths(main_client):
    schema = main_client.get("/openapi.json").json()

    assert schema["components"]["securitySchemes"]["BearerAuth"]["scheme"] == "bearer"
    assert schema["paths"]["/api/auth/login"]["post"]["security"] == []
    assert "/api/users/{user_id}" in schema["paths"]
