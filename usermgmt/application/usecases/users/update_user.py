"""
===============================================================================
USE CASE: Update User (partial)
===============================================================================

Name:
    Update User Use Case

Business Goal:
    Actualizar campos de un usuario respetando la policy de edición por rol.

Why (Context / Intención):
    - Un User solo toca su email/password; lo demás que mande se ignora.
    - Un Manager edita su cuenta y las cuentas User, pero no cambia roles.
    - Solo un Admin asigna Admin o promueve a Manager.
    - Todas las denegaciones y validaciones ocurren antes de escribir.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    UpdateUserUseCase

Responsibilities:
    - Cargar target (NOT_FOUND si no existe).
    - decide_edit -> FORBIDDEN con el motivo de la policy.
    - check_role_change sobre el rol pedido (aunque luego se descarte).
    - Filtrar campos permitidos y validarlos (password, formato de email).
    - Validar unicidad del email si realmente cambia.
    - Hashear password y persistir vía UserChanges.

Collaborators:
    - UserRepository: get_user_by_id / get_user_by_email / update_user
    - access_policy: decide_edit / check_role_change / permitted_changes
===============================================================================
"""

from __future__ import annotations

from typing import Any, Callable

from ....crosscutting.exceptions import DuplicateEmailError
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_policy_denial
from ....domain.access_policy import (
    FIELD_EMAIL,
    FIELD_NAME,
    FIELD_PASSWORD,
    FIELD_ROLE,
    FIELD_STATUS,
    Actor,
    check_role_change,
    decide_edit,
    permitted_changes,
)
from ....domain.repositories import UserRepository
from ....identity.users import User, UserChanges, UserRole, UserStatus
from .user_inputs import check_email, check_password, clean
from .user_results import UserError, UserResult


class UpdateUserUseCase:
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
        user_id: int,
        actor: Actor,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
    ) -> UserResult:
        # ---------------------------------------------------------------------
        # 1) Cargar target.
        # ---------------------------------------------------------------------
        target = self._users.get_user_by_id(user_id)
        if target is None:
            return UserResult(error=UserError.not_found())

        # ---------------------------------------------------------------------
        # 2) Policy: edición + escalamiento de rol.
        # ---------------------------------------------------------------------
        decision = decide_edit(actor, target)
        if not decision.allowed:
            return self._forbidden(decision.reason, actor, target)

        role_decision = check_role_change(actor, target, role)
        if not role_decision.allowed:
            return self._forbidden(role_decision.reason, actor, target)

        # ---------------------------------------------------------------------
        # 3) Campos permitidos (lo demás se ignora en silencio).
        # ---------------------------------------------------------------------
        allowed = permitted_changes(
            decision,
            {
                FIELD_NAME: clean(name),
                FIELD_EMAIL: clean(email),
                FIELD_PASSWORD: password or None,
                FIELD_ROLE: role,
                FIELD_STATUS: status,
            },
        )

        error = self._validate(allowed)
        if error is not None:
            return UserResult(error=error)

        # ---------------------------------------------------------------------
        # 4) Unicidad del email solo si cambia.
        # ---------------------------------------------------------------------
        new_email = allowed.get(FIELD_EMAIL)
        if new_email is not None and new_email != target.email:
            existing = self._users.get_user_by_email(new_email)
            if existing is not None and existing.id != target.id:
                return UserResult(error=UserError.email_exists())

        # ---------------------------------------------------------------------
        # 5) Persistir.
        # ---------------------------------------------------------------------
        changes = self._to_changes(allowed)
        try:
            updated = self._users.update_user(user_id, changes)
        except DuplicateEmailError:
            return UserResult(error=UserError.email_exists())

        if updated is None:
            # Race: borrado entre lectura y escritura.
            return UserResult(error=UserError.not_found())

        return UserResult(user=updated)

    # =========================================================================
    # Helpers privados
    # =========================================================================

    def _validate(self, allowed: dict[str, Any]) -> UserError | None:
        password = allowed.get(FIELD_PASSWORD)
        if password is not None:
            error = check_password(password, self._password_min_length)
            if error is not None:
                return error
        new_email = allowed.get(FIELD_EMAIL)
        if new_email is not None:
            return check_email(new_email)
        return None

    def _to_changes(self, allowed: dict[str, Any]) -> UserChanges:
        password = allowed.get(FIELD_PASSWORD)
        return UserChanges(
            name=allowed.get(FIELD_NAME),
            email=allowed.get(FIELD_EMAIL),
            password_hash=self._hash(password) if password is not None else None,
            role=allowed.get(FIELD_ROLE),
            status=allowed.get(FIELD_STATUS),
        )

    @staticmethod
    def _forbidden(reason: str | None, actor: Actor, target: User) -> UserResult:
        record_policy_denial("update")
        logger.info(
            "Update denied by policy",
            extra={
                "actor_role": actor.role.value,
                "target_id": target.id,
                "target_role": target.role.value,
            },
        )
        return UserResult(error=UserError.forbidden(reason or "Access denied."))
