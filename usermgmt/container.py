"""
===============================================================================
TARJETA CRC — usermgmt/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer el repositorio de usuarios según el entorno (in-memory en test,
    PostgreSQL en runtime).
  - Exponer factories de casos de uso para FastAPI (Depends) y scripts.
  - Inyectar hasher / verificador / emisor de tokens a los casos de uso.

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.UserRepository (puerto)
  - infrastructure.repositories (Postgres / InMemory)
  - identity.auth_users (Argon2 + JWT)
  - application.usecases (casos de uso)

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (use cases dependen de puertos)
  - Lazy singletons con lru_cache

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI (solo expone factories).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetCurrentUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LoginUserUseCase,
    RegisterUserUseCase,
    UpdateUserUseCase,
)
from .crosscutting.config import get_settings
from .domain.repositories import UserRepository
from .identity.auth_users import (
    burn_password_check,
    create_access_token,
    hash_password,
    verify_password,
)
from .infrastructure.repositories import (
    InMemoryUserRepository,
    PostgresUserRepository,
)

# =============================================================================
# Repositorios (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    """Repositorio de usuarios (in-memory en test; Postgres en runtime)."""
    if get_settings().is_test_env():
        return InMemoryUserRepository()
    return PostgresUserRepository()


# =============================================================================
# Casos de uso (una instancia por request)
# =============================================================================


def get_register_user_use_case() -> RegisterUserUseCase:
    """Caso de uso: auto-registro (rol forzado a User)."""
    return RegisterUserUseCase(
        get_user_repository(),
        password_hasher=hash_password,
        token_issuer=create_access_token,
        password_min_length=get_settings().password_min_length,
    )


def get_login_user_use_case() -> LoginUserUseCase:
    """Caso de uso: login con email + password."""
    return LoginUserUseCase(
        get_user_repository(),
        password_verifier=verify_password,
        token_issuer=create_access_token,
        dummy_verifier=burn_password_check,
    )


def get_current_user_use_case() -> GetCurrentUserUseCase:
    return GetCurrentUserUseCase(get_user_repository())


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(get_user_repository())


def get_get_user_use_case() -> GetUserUseCase:
    return GetUserUseCase(get_user_repository())


def get_create_user_use_case() -> CreateUserUseCase:
    """Caso de uso: alta administrativa (cualquier rol)."""
    return CreateUserUseCase(
        get_user_repository(),
        password_hasher=hash_password,
        password_min_length=get_settings().password_min_length,
    )


def get_update_user_use_case() -> UpdateUserUseCase:
    """Caso de uso: edición parcial gobernada por la policy."""
    return UpdateUserUseCase(
        get_user_repository(),
        password_hasher=hash_password,
        password_min_length=get_settings().password_min_length,
    )


def get_delete_user_use_case() -> DeleteUserUseCase:
    return DeleteUserUseCase(get_user_repository())
