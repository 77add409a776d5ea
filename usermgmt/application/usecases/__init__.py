"""
===============================================================================
USE CASES (Public API / Exports)
===============================================================================

Punto de importación estable de los casos de uso para container y routers.
===============================================================================
"""

from .users import (
    AuthResult,
    CreateUserUseCase,
    DeleteUserResult,
    DeleteUserUseCase,
    GetCurrentUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LoginUserUseCase,
    RegisterUserUseCase,
    UpdateUserUseCase,
    UserError,
    UserErrorCode,
    UserListResult,
    UserResult,
)

__all__ = [
    "AuthResult",
    "CreateUserUseCase",
    "DeleteUserResult",
    "DeleteUserUseCase",
    "GetCurrentUserUseCase",
    "GetUserUseCase",
    "ListUsersUseCase",
    "LoginUserUseCase",
    "RegisterUserUseCase",
    "UpdateUserUseCase",
    "UserError",
    "UserErrorCode",
    "UserListResult",
    "UserResult",
]
