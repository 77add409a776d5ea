import logging

import pytest

from usermgmt.audit import AUDIT_USERS_UPDATE, emit_audit_event
from usermgmt.identity.auth_users import TokenPayload
from usermgmt.identity.users import UserRole

pytestmark = pytest.mark.unit


def _audit_records(caplog):
    return [r for r in caplog.records if getattr(r, "audit", False)]


def test_audit_event_carries_actor_and_role(caplog):
    claims = TokenPayload(user_id=3, email="a@example.com", role=UserRole.ADMIN)

    with caplog.at_level(logging.INFO, logger="usermgmt"):
        emit_audit_event(
            action=AUDIT_USERS_UPDATE,
            claims=claims,
            target_id=9,
            metadata={"fields": ("name", "role")},
        )

    [record] = _audit_records(caplog)
    assert record.action == "users.update"
    assert record.actor == "user:3"
    assert record.target_id == 9
    assert record.metadata == {"actor_role": "Admin", "fields": ["name", "role"]}


def test_audit_event_without_claims_is_anonymous(caplog):
    with caplog.at_level(logging.INFO, logger="usermgmt"):
        emit_audit_event(action="auth.login_failed")

    [record] = _audit_records(caplog)
    assert record.actor == "anonymous"
    assert record.metadata == {}


def test_login_route_audits_failures(client, caplog):
    with caplog.at_level(logging.INFO, logger="usermgmt"):
        client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "secret1"},
        )

    [record] = _audit_records(caplog)
    assert record.action == "auth.login_failed"
    assert record.metadata == {"reason": "UNAUTHENTICATED"}
