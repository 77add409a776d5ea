"""
===============================================================================
TARJETA CRC — api/schemas.py
===============================================================================

Módulo:
    Schemas HTTP para auth y usuarios

Responsabilidades:
    - Definir DTOs de request/response de /api/auth y /api/users.
    - Representación externa camelCase (createdAt / updatedAt / expiresIn).
    - Garantizar que el password nunca forme parte de una respuesta.

Reglas:
    - Campos obligatorios se validan en los casos de uso (mensajes estables);
      aquí solo tipos, enums y límites de tamaño.
    - Schemas NO importan infraestructura ni ejecutan casos de uso.

Colaboradores:
    - identity.users (User, UserRole, UserStatus)
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..identity.users import User, UserRole, UserStatus

_MAX_NAME = 200
_MAX_EMAIL = 320
_MAX_PASSWORD = 512


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class RegisterReq(BaseModel):
    """Auto-registro. role es opcional y solo se acepta "User"."""

    name: str | None = Field(default=None, max_length=_MAX_NAME)
    email: str | None = Field(default=None, max_length=_MAX_EMAIL)
    password: str | None = Field(default=None, max_length=_MAX_PASSWORD)
    role: UserRole | None = None


class LoginReq(BaseModel):
    email: str | None = Field(default=None, max_length=_MAX_EMAIL)
    password: str | None = Field(default=None, max_length=_MAX_PASSWORD)


class CreateUserReq(BaseModel):
    """Alta administrativa (Admin): rol y estado opcionales."""

    name: str | None = Field(default=None, max_length=_MAX_NAME)
    email: str | None = Field(default=None, max_length=_MAX_EMAIL)
    password: str | None = Field(default=None, max_length=_MAX_PASSWORD)
    role: UserRole | None = None
    status: UserStatus | None = None


class UpdateUserReq(BaseModel):
    """Edición parcial: solo se aplican los campos que la policy permite."""

    name: str | None = Field(default=None, max_length=_MAX_NAME)
    email: str | None = Field(default=None, max_length=_MAX_EMAIL)
    password: str | None = Field(default=None, max_length=_MAX_PASSWORD)
    role: UserRole | None = None
    status: UserStatus | None = None


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class UserRes(_CamelModel):
    """Representación externa de un usuario (sin password)."""

    id: int
    name: str
    email: str
    role: UserRole
    status: UserStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthRes(_CamelModel):
    """Respuesta de registro / login."""

    user: UserRes
    token: str
    expires_in: int


class MessageRes(BaseModel):
    message: str


def to_user_res(user: User) -> UserRes:
    """Mapea entidad -> DTO HTTP."""
    return UserRes(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        status=user.status,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
