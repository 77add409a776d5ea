"""
Name: Auth Users Tests

Responsibilities:
  - Argon2 hash/verify behaviour
  - JWT issue/decode (claims, expiry, tampering)
  - Bearer extraction and role dependencies
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from usermgmt.api.exception_handlers import register_exception_handlers
from usermgmt.crosscutting.error_responses import AppHTTPException
from usermgmt.identity.auth_users import (
    JWT_ALGORITHM,
    AuthSettings,
    TokenPayload,
    burn_password_check,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    hash_password,
    require_role,
    require_user,
    verify_password,
)
from usermgmt.identity.users import User, UserRole, UserStatus

pytestmark = pytest.mark.unit

SETTINGS = AuthSettings(jwt_secret="unit-test-secret", jwt_access_ttl_minutes=60)


def _user(role: UserRole = UserRole.MANAGER) -> User:
    return User(
        id=7,
        name="Mia",
        email="mia@example.com",
        password_hash="x",
        role=role,
        status=UserStatus.ACTIVE,
    )


def _encode(payload: dict, secret: str = SETTINGS.jwt_secret) -> str:
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def _future(seconds: int = 600) -> int:
    return int((datetime.now(timezone.utc) + timedelta(seconds=seconds)).timestamp())


# ============================================================================
# Passwords
# ============================================================================


def test_hash_is_salted_and_verifies():
    first = hash_password("secret1")
    second = hash_password("secret1")

    assert first != second
    assert first.startswith("$argon2")
    assert verify_password("secret1", first)
    assert not verify_password("secret2", first)


def test_verify_with_corrupt_hash_returns_false():
    assert verify_password("secret1", "not-a-hash") is False


def test_burn_password_check_returns_nothing():
    assert burn_password_check("anything") is None


# ============================================================================
# Tokens
# ============================================================================


def test_token_round_trip_carries_identity():
    token, expires_in = create_access_token(_user(), SETTINGS)

    claims = decode_access_token(token, SETTINGS)

    assert expires_in == 3600
    assert claims == TokenPayload(
        user_id=7, email="mia@example.com", role=UserRole.MANAGER
    )


def test_token_contains_expected_claims():
    token, _ = create_access_token(_user(), SETTINGS)

    payload = jwt.decode(token, SETTINGS.jwt_secret, algorithms=[JWT_ALGORITHM])

    assert payload["sub"] == "7"
    assert payload["id"] == 7
    assert payload["role"] == "Manager"
    assert payload["typ"] == "access"
    assert payload["exp"] - payload["iat"] == 3600


def test_default_ttl_is_seven_days():
    _, expires_in = create_access_token(_user())

    assert expires_in == 7 * 24 * 60 * 60


def test_token_expired_seven_days_ago_is_rejected():
    issued = datetime.now(timezone.utc) - timedelta(days=14)
    token = _encode(
        {
            "sub": "7",
            "email": "mia@example.com",
            "role": "User",
            "iat": int(issued.timestamp()),
            "exp": int((issued + timedelta(days=7)).timestamp()),
        }
    )

    with pytest.raises(AppHTTPException) as exc_info:
        decode_access_token(token, SETTINGS)

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Invalid or expired token."


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@example.com", "role": "User"},
        {"sub": "7", "role": "User"},
        {"sub": "7", "email": "a@example.com"},
        {"sub": "7", "email": "a@example.com", "role": "Root"},
        {"sub": "abc", "email": "a@example.com", "role": "User"},
        {"sub": "7", "email": "a@example.com", "role": "User", "typ": "refresh"},
    ],
)
def test_malformed_claims_are_invalid_tokens(payload):
    token = _encode({**payload, "exp": _future()})

    with pytest.raises(AppHTTPException) as exc_info:
        decode_access_token(token, SETTINGS)

    assert exc_info.value.status_code == 403


def test_token_signed_with_other_secret_is_rejected():
    token, _ = create_access_token(
        _user(), AuthSettings(jwt_secret="someone-else", jwt_access_ttl_minutes=60)
    )

    with pytest.raises(AppHTTPException) as exc_info:
        decode_access_token(token, SETTINGS)

    assert exc_info.value.status_code == 403


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("Bearer abc.def", "abc.def"),
        ("bearer   abc.def  ", "abc.def"),
        ("Basic abc", None),
        ("Bearer", None),
        ("Bearer   ", None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


# ============================================================================
# Dependencies
# ============================================================================


@pytest.fixture
def guarded_client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/any")
    def any_user(claims: TokenPayload = Depends(require_user())):
        return {"id": claims.user_id, "role": claims.role.value}

    @app.get("/admin")
    def admin_only(claims: TokenPayload = Depends(require_role(UserRole.ADMIN))):
        return {"ok": True}

    return TestClient(app)


def test_require_user_without_token_is_401(guarded_client):
    resp = guarded_client.get("/any")

    assert resp.status_code == 401
    assert resp.json()["error"] == "Access denied. No token provided."


def test_require_user_with_garbage_token_is_403(guarded_client):
    resp = guarded_client.get("/any", headers={"Authorization": "Bearer nope"})

    assert resp.status_code == 403
    assert resp.json()["error"] == "Invalid or expired token."


def test_require_user_accepts_valid_token(guarded_client, auth_headers):
    resp = guarded_client.get("/any", headers=auth_headers(_user()))

    assert resp.status_code == 200
    assert resp.json() == {"id": 7, "role": "Manager"}


def test_require_role_admin(guarded_client, auth_headers):
    denied = guarded_client.get("/admin", headers=auth_headers(_user()))
    assert denied.status_code == 403
    assert denied.json()["error"] == "Access denied. Admin privileges required."

    allowed = guarded_client.get("/admin", headers=auth_headers(_user(UserRole.ADMIN)))
    assert allowed.status_code == 200
