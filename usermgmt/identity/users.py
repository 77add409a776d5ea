"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario

Responsabilidades:
    - Definir los enums cerrados de rol (Admin/Manager/User) y estado (Active/Inactive).
    - Definir el dataclass User que circula entre repositorios, policy y casos de uso.
    - Definir UserChanges: el set de campos persistibles en un update parcial.

Colaboradores:
    - identity/auth_users.py: usa User y UserRole para emitir/validar JWT.
    - domain/access_policy.py: decide sobre User/UserRole.
    - infrastructure/repositories/*: mapean filas -> User.

Notas:
    - Este módulo NO contiene lógica de negocio: solo "shapes" de datos.
    - password_hash vive en la entidad pero NUNCA en DTOs de salida.
    - Si agregás un rol nuevo, access_policy falla fuerte hasta que lo contemples.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Roles soportados (valores tal cual se persisten y viajan en el JWT)."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    USER = "User"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


@dataclass(frozen=True, slots=True)
class User:
    """Registro de usuario."""

    id: int
    name: str
    email: str
    password_hash: str
    role: UserRole
    status: UserStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class UserChanges:
    """
    Update parcial ya autorizado y hasheado.

    None significa "no tocar". Los repos iteran `as_dict()` para armar el SET.
    """

    name: str | None = None
    email: str | None = None
    password_hash: str | None = None
    role: UserRole | None = None
    status: UserStatus | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.as_dict()
