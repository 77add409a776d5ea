"""
Domain layer: persistence ports and the pure access policy for user records.
"""

from .access_policy import (
    Actor,
    Decision,
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
from .repositories import UserRepository

__all__ = [
    "Actor",
    "Decision",
    "EditDecision",
    "UserRepository",
    "check_role_change",
    "decide_admin_create",
    "decide_delete",
    "decide_edit",
    "decide_login",
    "decide_registration_role",
    "permitted_changes",
    "visible_roles",
]
