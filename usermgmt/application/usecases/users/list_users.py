"""
===============================================================================
USE CASE: List Users (role-filtered)
===============================================================================

Business Goal:
    Listar los usuarios que el actor puede ver según su rol:
      - Admin   -> todos
      - Manager -> Manager + User
      - User    -> User
    Orden estable: id ascendente (lo garantiza el repositorio).
===============================================================================
"""

from __future__ import annotations

from ....domain.access_policy import Actor, visible_roles
from ....domain.repositories import UserRepository
from .user_results import UserListResult


class ListUsersUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, actor: Actor) -> UserListResult:
        roles = visible_roles(actor.role)
        return UserListResult(users=self._users.list_users(roles=roles))
