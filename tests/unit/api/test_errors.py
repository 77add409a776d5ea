"""
Name: RFC 7807 Error Response Tests

Responsibilities:
  - Problem Details shape (type/title/status/detail + error + code)
  - Typed service exceptions -> status codes
  - Framework errors (unknown route, bad enum, broken JSON) -> 4xx
  - Unhandled exceptions -> generic 500
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from usermgmt.api.error_mapping import raise_user_error
from usermgmt.api.exception_handlers import register_exception_handlers
from usermgmt.application.usecases.users import UserError, UserErrorCode
from usermgmt.crosscutting.error_responses import (
    PROBLEM_JSON_MEDIA_TYPE,
    AppHTTPException,
    ErrorCode,
    build_problem,
)
from usermgmt.crosscutting.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    UserServiceError,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def failing_client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/dup")
    def dup():
        raise DuplicateEmailError("a@example.com")

    @app.get("/db")
    def db():
        raise DatabaseError("Database operation failed")

    @app.get("/service")
    def service():
        raise UserServiceError("Something broke")

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    return TestClient(app, raise_server_exceptions=False)


def test_build_problem_shape():
    problem = build_problem(
        status=404, code=ErrorCode.NOT_FOUND, detail="User not found", instance="/x"
    )

    assert problem == {
        "type": "about:blank/not_found",
        "title": "Not Found",
        "status": 404,
        "detail": "User not found",
        "error": "User not found",
        "code": "NOT_FOUND",
        "instance": "/x",
    }


def test_duplicate_email_is_400_conflict(failing_client):
    resp = failing_client.get("/dup")

    assert resp.status_code == 400
    assert resp.headers["content-type"].startswith(PROBLEM_JSON_MEDIA_TYPE)
    assert resp.json()["error"] == "Email already exists"
    assert resp.json()["code"] == "CONFLICT"


def test_database_error_is_500_with_error_id(failing_client):
    resp = failing_client.get("/db")

    assert resp.status_code == 500
    data = resp.json()
    assert data["code"] == "DATABASE_ERROR"
    assert data["error"] == "Database operation failed"
    assert "error_id" in data["errors"][0]


def test_generic_service_error_is_500(failing_client):
    resp = failing_client.get("/service")

    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL_ERROR"


def test_unhandled_exception_is_500(failing_client):
    resp = failing_client.get("/boom")

    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL_ERROR"
    assert resp.json()["error"] == "kaboom"


def test_unhandled_exception_hides_detail_in_production(failing_client):
    with patch("usermgmt.api.exception_handlers.get_settings") as settings:
        settings.return_value.is_production.return_value = True
        resp = failing_client.get("/boom")

    assert resp.status_code == 500
    assert resp.json()["error"] == "Internal server error"


def test_unknown_route_is_404_problem(failing_client):
    resp = failing_client.get("/nope")

    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_bad_enum_and_broken_json_are_400(client):
    bad_enum = client.post(
        "/api/auth/register",
        json={"name": "A", "email": "a@example.com", "password": "x" * 8, "role": "God"},
    )
    assert bad_enum.status_code == 400
    assert bad_enum.json()["code"] == "VALIDATION_ERROR"
    assert bad_enum.json()["errors"][0]["field"] == "role"

    broken = client.post(
        "/api/auth/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert broken.status_code == 400


@pytest.mark.parametrize(
    "code, status",
    [
        (UserErrorCode.VALIDATION_ERROR, 400),
        (UserErrorCode.UNAUTHENTICATED, 401),
        (UserErrorCode.FORBIDDEN, 403),
        (UserErrorCode.NOT_FOUND, 404),
        (UserErrorCode.CONFLICT, 400),
    ],
)
def test_raise_user_error_maps_codes(code, status):
    with pytest.raises(AppHTTPException) as exc_info:
        raise_user_error(UserError(code, "msg"))

    assert exc_info.value.status_code == status
    assert exc_info.value.detail == "msg"
