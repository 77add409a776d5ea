# =============================================================================
# FILE: application/dev_seed_users.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Users (local/test only)
===============================================================================

Qué es:
    Asegura las tres cuentas demo (una por rol) para desarrollo y tests E2E:
      - Admin   admin@example.com
      - Manager manager@example.com
      - User    user@example.com
    Todas con el mismo password (DEV_SEED_PASSWORD, default "admin123").

Seguridad:
    - Guard estricto: solo corre si app_env es local/test.
    - force_reset borra TODOS los usuarios antes de sembrar.

Patrones:
    - Task orchestration (seed)
    - Dependency Injection (repo + hasher)
    - Idempotencia (ensure-create; existentes se saltean salvo force)

CRC:
    Component: ensure_dev_users / seed_users
    Responsibilities:
      - Validar guard de ambiente
      - Crear cuentas faltantes (o recrear todas con force)
    Collaborators:
      - UserRepository
      - password_hasher
      - Settings
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..crosscutting.config import Settings
from ..crosscutting.exceptions import DuplicateEmailError
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from ..identity.users import User, UserRole, UserStatus


@dataclass(frozen=True, slots=True)
class SeedAccount:
    name: str
    email: str
    role: UserRole


SEED_ACCOUNTS: tuple[SeedAccount, ...] = (
    SeedAccount(name="Admin User", email="admin@example.com", role=UserRole.ADMIN),
    SeedAccount(
        name="Manager User", email="manager@example.com", role=UserRole.MANAGER
    ),
    SeedAccount(name="Test User", email="user@example.com", role=UserRole.USER),
)


def seed_users(
    user_repo: UserRepository,
    *,
    password: str,
    password_hasher: Callable[[str], str],
    force: bool = False,
) -> list[User]:
    """
    Crea las cuentas demo que falten. Devuelve las creadas.

    - force=True: borra todos los usuarios primero.
    - Un único hash para las tres cuentas (mismo password).
    """
    if not password:
        raise ValueError("Seed password must not be empty")

    if force:
        removed = user_repo.delete_all_users()
        logger.warning("Dev seed: existing users deleted", extra={"count": removed})

    password_hash = password_hasher(password)
    created: list[User] = []

    for account in SEED_ACCOUNTS:
        if user_repo.get_user_by_email(account.email) is not None:
            logger.info(
                "Dev seed: user exists; skipping", extra={"email": account.email}
            )
            continue
        try:
            user = user_repo.create_user(
                name=account.name,
                email=account.email,
                password_hash=password_hash,
                role=account.role,
                status=UserStatus.ACTIVE,
            )
        except DuplicateEmailError:
            # Otro proceso lo creó en paralelo: el objetivo (que exista) se cumple.
            logger.info(
                "Dev seed: user created concurrently", extra={"email": account.email}
            )
            continue
        created.append(user)
        logger.info(
            "Dev seed: user created",
            extra={"email": account.email, "role": account.role.value},
        )

    return created


def _assert_allowed_environment(settings: Settings) -> None:
    if not settings.allows_dev_seed():
        env = (settings.app_env or "").strip().lower()
        raise RuntimeError(
            f"FATAL: DEV_SEED_USERS is enabled but ENV is '{env}' "
            "(must be 'local' or 'test'). Safety guard prevents accidental seeding."
        )


def ensure_dev_users(
    settings: Settings,
    *,
    user_repo: UserRepository,
    password_hasher: Callable[[str], str],
) -> list[User]:
    """
    Seed al arranque si DEV_SEED_USERS=true.

    Behavior:
      - Disabled: no-op
      - Enabled: valida ambiente y delega en seed_users()
    """
    if not settings.dev_seed_users:
        return []

    _assert_allowed_environment(settings)

    logger.info(
        "Dev seed: ensuring demo users",
        extra={"force_reset": settings.dev_seed_force_reset},
    )
    return seed_users(
        user_repo,
        password=settings.dev_seed_password,
        password_hasher=password_hasher,
        force=settings.dev_seed_force_reset,
    )
