"""
===============================================================================
USE CASE: Delete User (hard delete)
===============================================================================

Reglas:
    - NOT_FOUND si el usuario no existe.
    - Admin borra a cualquiera excepto a sí mismo.
    - Manager / User solo se borran a sí mismos.
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.metrics import record_policy_denial
from ....domain.access_policy import Actor, decide_delete
from ....domain.repositories import UserRepository
from .user_results import DeleteUserResult, UserError


class DeleteUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, user_id: int, actor: Actor) -> DeleteUserResult:
        target = self._users.get_user_by_id(user_id)
        if target is None:
            return DeleteUserResult(error=UserError.not_found())

        decision = decide_delete(actor, target)
        if not decision.allowed:
            record_policy_denial("delete")
            return DeleteUserResult(error=UserError.forbidden(decision.reason or ""))

        if not self._users.delete_user(user_id):
            return DeleteUserResult(error=UserError.not_found())

        return DeleteUserResult(deleted=True)
