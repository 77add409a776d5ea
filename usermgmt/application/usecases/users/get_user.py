"""
===============================================================================
USE CASES: Get User / Get Current User
===============================================================================

GetUserUseCase
    Devuelve un usuario por id a cualquier actor autenticado. La visibilidad
    por rol filtra solo el listado (GET /users); aquí la única falla es
    NOT_FOUND cuando el registro no existe.

GetCurrentUserUseCase
    Perfil del actor del token. El token es stateless: si la cuenta se borró
    después de emitirlo, responde NOT_FOUND.
===============================================================================
"""

from __future__ import annotations

from ....domain.access_policy import Actor
from ....domain.repositories import UserRepository
from .user_results import UserError, UserResult


class GetUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, user_id: int, actor: Actor) -> UserResult:
        user = self._users.get_user_by_id(user_id)
        if user is None:
            return UserResult(error=UserError.not_found())
        return UserResult(user=user)


class GetCurrentUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, actor: Actor) -> UserResult:
        user = self._users.get_user_by_id(actor.user_id)
        if user is None:
            return UserResult(error=UserError.not_found())
        return UserResult(user=user)
