"""
===============================================================================
USE CASE: Create User (administrative)
===============================================================================

Business Goal:
    Alta de cuentas por un Admin, con cualquier rol y estado.

Invariantes:
    - Solo Admin (policy.decide_admin_create; el endpoint además exige Admin).
    - name, email y password obligatorios; password con largo mínimo.
    - Defaults: role=User, status=Active.
    - Email único (pre-chequeo + constraint del store).
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from ....crosscutting.exceptions import DuplicateEmailError
from ....crosscutting.metrics import record_policy_denial
from ....domain.access_policy import Actor, decide_admin_create
from ....domain.repositories import UserRepository
from ....identity.users import UserRole, UserStatus
from .user_inputs import MSG_REQUIRED_FIELDS, check_email, check_password, clean
from .user_results import UserError, UserResult


class CreateUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        *,
        password_hasher: Callable[[str], str],
        password_min_length: int = 6,
    ) -> None:
        self._users = user_repository
        self._hash = password_hasher
        self._password_min_length = password_min_length

    def execute(
        self,
        actor: Actor,
        *,
        name: str | None,
        email: str | None,
        password: str | None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
    ) -> UserResult:
        decision = decide_admin_create(actor, role)
        if not decision.allowed:
            record_policy_denial("create")
            return UserResult(error=UserError.forbidden(decision.reason or ""))

        name = clean(name)
        email = clean(email)
        if not name or not email or not password:
            return UserResult(error=UserError.validation(MSG_REQUIRED_FIELDS))

        error = check_password(password, self._password_min_length) or check_email(
            email
        )
        if error is not None:
            return UserResult(error=error)

        if self._users.get_user_by_email(email) is not None:
            return UserResult(error=UserError.email_exists())

        try:
            user = self._users.create_user(
                name=name,
                email=email,
                password_hash=self._hash(password),
                role=role or UserRole.USER,
                status=status or UserStatus.ACTIVE,
            )
        except DuplicateEmailError:
            return UserResult(error=UserError.email_exists())

        return UserResult(user=user)
