"""
Name: Access Policy Tests

Responsibilities:
  - Visibility per role (list + single record)
  - Edit authorization and allowed fields
  - Role-escalation sub-rule
  - Registration / admin-create / delete / login decisions

Notes:
  - Pure functions: no store, no FastAPI
"""

from datetime import datetime, timezone

import pytest

from usermgmt.domain.access_policy import (
    ALL_EDITABLE_FIELDS,
    MSG_ACCOUNT_INACTIVE,
    MSG_ADMIN_PRIVILEGES,
    MSG_ADMIN_SELF_DELETE,
    MSG_CREATE_ADMIN_DENIED,
    MSG_DELETE_OTHERS_DENIED,
    MSG_MANAGER_EDIT_DENIED,
    MSG_ROLE_ADMIN_DENIED,
    MSG_ROLE_CHANGE_DENIED,
    MSG_ROLE_MANAGER_DENIED,
    MSG_SELF_REGISTER_ROLE,
    MSG_USER_EDIT_DENIED,
    SELF_SERVICE_FIELDS,
    Actor,
    EditDecision,
    check_role_change,
    decide_admin_create,
    decide_delete,
    decide_edit,
    decide_login,
    decide_registration_role,
    permitted_changes,
    visible_roles,
)
from usermgmt.identity.users import User, UserRole, UserStatus

pytestmark = pytest.mark.unit

_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _user(user_id: int, role: UserRole, status: UserStatus = UserStatus.ACTIVE) -> User:
    return User(
        id=user_id,
        name=f"{role.value} {user_id}",
        email=f"u{user_id}@example.com",
        password_hash="hash",
        role=role,
        status=status,
        created_at=_NOW,
        updated_at=_NOW,
    )


ADMIN = _user(1, UserRole.ADMIN)
MANAGER = _user(2, UserRole.MANAGER)
OTHER_MANAGER = _user(3, UserRole.MANAGER)
USER = _user(4, UserRole.USER)
OTHER_USER = _user(5, UserRole.USER)


def _actor(user: User) -> Actor:
    return Actor(user_id=user.id, role=user.role)


# ============================================================================
# Visibility
# ============================================================================


@pytest.mark.parametrize(
    "role, expected",
    [
        (UserRole.ADMIN, {UserRole.ADMIN, UserRole.MANAGER, UserRole.USER}),
        (UserRole.MANAGER, {UserRole.MANAGER, UserRole.USER}),
        (UserRole.USER, {UserRole.USER}),
    ],
)
def test_visible_roles_per_actor_role(role, expected):
    assert visible_roles(role) == frozenset(expected)


def test_unknown_role_is_a_programming_error():
    with pytest.raises(ValueError, match="Unhandled user role"):
        visible_roles("Superuser")  # type: ignore[arg-type]


# ============================================================================
# Edit
# ============================================================================


def test_admin_edits_anyone_with_all_fields():
    for target in (ADMIN, MANAGER, USER):
        decision = decide_edit(_actor(ADMIN), target)
        assert decision.allowed is True
        assert decision.fields == ALL_EDITABLE_FIELDS


def test_manager_edits_self_and_users():
    assert decide_edit(_actor(MANAGER), MANAGER).fields == ALL_EDITABLE_FIELDS
    assert decide_edit(_actor(MANAGER), USER).fields == ALL_EDITABLE_FIELDS


@pytest.mark.parametrize("target", [ADMIN, OTHER_MANAGER])
def test_manager_cannot_edit_admin_or_other_manager(target):
    decision = decide_edit(_actor(MANAGER), target)
    assert decision.allowed is False
    assert decision.reason == MSG_MANAGER_EDIT_DENIED


def test_user_edits_only_self_with_email_and_password():
    decision = decide_edit(_actor(USER), USER)
    assert decision.allowed is True
    assert decision.fields == SELF_SERVICE_FIELDS

    denied = decide_edit(_actor(USER), OTHER_USER)
    assert denied.allowed is False
    assert denied.reason == MSG_USER_EDIT_DENIED


def test_permitted_changes_drops_fields_outside_decision():
    decision = EditDecision(allowed=True, fields=SELF_SERVICE_FIELDS)
    requested = {
        "name": "X",
        "email": "new@example.com",
        "password": None,
        "role": UserRole.ADMIN,
        "status": UserStatus.INACTIVE,
    }
    assert permitted_changes(decision, requested) == {"email": "new@example.com"}


def test_permitted_changes_empty_when_denied():
    decision = EditDecision(allowed=False, reason="nope")
    assert permitted_changes(decision, {"name": "X"}) == {}


# ============================================================================
# Role escalation
# ============================================================================


def test_manager_cannot_self_promote_to_admin():
    decision = check_role_change(_actor(MANAGER), MANAGER, UserRole.ADMIN)
    assert decision.allowed is False
    assert decision.reason == MSG_ROLE_ADMIN_DENIED


def test_manager_cannot_promote_user_to_manager():
    decision = check_role_change(_actor(MANAGER), USER, UserRole.MANAGER)
    assert decision.allowed is False
    assert decision.reason == MSG_ROLE_MANAGER_DENIED


def test_non_admin_cannot_demote_self():
    decision = check_role_change(_actor(MANAGER), MANAGER, UserRole.USER)
    assert decision.allowed is False
    assert decision.reason == MSG_ROLE_CHANGE_DENIED


def test_requesting_current_role_is_a_noop():
    assert check_role_change(_actor(MANAGER), MANAGER, UserRole.MANAGER).allowed
    assert check_role_change(_actor(USER), USER, UserRole.USER).allowed
    assert check_role_change(_actor(USER), USER, None).allowed


def test_escalation_checked_even_when_field_is_ignored():
    # Un User no puede tocar role, pero pedir Admin igual se rechaza.
    decision = check_role_change(_actor(USER), USER, UserRole.ADMIN)
    assert decision.allowed is False
    assert decision.reason == MSG_ROLE_ADMIN_DENIED


def test_admin_may_change_any_role():
    for role in UserRole:
        assert check_role_change(_actor(ADMIN), USER, role).allowed


# ============================================================================
# Create
# ============================================================================


@pytest.mark.parametrize("requested", [None, UserRole.USER])
def test_registration_defaults_to_user(requested):
    assert decide_registration_role(requested).allowed is True


@pytest.mark.parametrize("requested", [UserRole.ADMIN, UserRole.MANAGER])
def test_registration_rejects_privileged_roles(requested):
    decision = decide_registration_role(requested)
    assert decision.allowed is False
    assert decision.reason == MSG_SELF_REGISTER_ROLE


def test_admin_create_is_admin_only():
    assert decide_admin_create(_actor(ADMIN), UserRole.ADMIN).allowed

    denied = decide_admin_create(_actor(MANAGER), UserRole.USER)
    assert denied.allowed is False
    assert denied.reason == MSG_ADMIN_PRIVILEGES

    denied_admin = decide_admin_create(_actor(MANAGER), UserRole.ADMIN)
    assert denied_admin.reason == MSG_CREATE_ADMIN_DENIED


# ============================================================================
# Delete
# ============================================================================


def test_admin_cannot_delete_self():
    decision = decide_delete(_actor(ADMIN), ADMIN)
    assert decision.allowed is False
    assert decision.reason == MSG_ADMIN_SELF_DELETE


def test_admin_deletes_others():
    assert decide_delete(_actor(ADMIN), MANAGER).allowed
    assert decide_delete(_actor(ADMIN), USER).allowed


@pytest.mark.parametrize("actor_user", [MANAGER, USER])
def test_non_admin_deletes_only_self(actor_user):
    assert decide_delete(_actor(actor_user), actor_user).allowed

    decision = decide_delete(_actor(actor_user), OTHER_USER)
    assert decision.allowed is False
    assert decision.reason == MSG_DELETE_OTHERS_DENIED


# ============================================================================
# Login
# ============================================================================


def test_login_gate_rejects_inactive():
    assert decide_login(USER).allowed is True

    decision = decide_login(_user(9, UserRole.USER, UserStatus.INACTIVE))
    assert decision.allowed is False
    assert decision.reason == MSG_ACCOUNT_INACTIVE
