"""User use cases: registration, login and role-governed CRUD."""

from .create_user import CreateUserUseCase
from .delete_user import DeleteUserUseCase
from .get_user import GetCurrentUserUseCase, GetUserUseCase
from .list_users import ListUsersUseCase
from .login_user import LoginUserUseCase
from .register_user import RegisterUserUseCase
from .update_user import UpdateUserUseCase
from .user_results import (
    AuthResult,
    DeleteUserResult,
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
