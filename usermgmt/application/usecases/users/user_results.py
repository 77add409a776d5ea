"""
===============================================================================
USER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    User Use Case Results

Business Goal:
    Proveer modelos compartidos de resultados y errores para los casos de uso
    de usuarios (registro, login, CRUD), con un contrato estable para:
      - validaciones
      - autenticación
      - autorización (policy)
      - recursos no encontrados
      - conflictos de unicidad (email)

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de lanzar excepciones
      "hacia afuera"; la API los traduce en un único lugar (error_mapping).
    - Todas las validaciones y chequeos de policy ocurren antes de escribir:
      un error nunca deja una escritura parcial.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    user_results models (module)

Responsibilities:
    - UserErrorCode: categorías estables.
    - UserError: code + message (message es el texto que ve el cliente).
    - UserResult / UserListResult / AuthResult / DeleteUserResult.

Collaborators:
    - identity.users.User
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ....identity.users import User


class UserErrorCode(str, Enum):
    """
    Códigos de error de casos de uso de usuarios.

      - VALIDATION_ERROR: inputs inválidos o incompletos.
      - UNAUTHENTICATED: credenciales inválidas.
      - FORBIDDEN: la policy rechazó la operación (o cuenta inactiva).
      - NOT_FOUND: usuario inexistente.
      - CONFLICT: email ya registrado.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


MSG_USER_NOT_FOUND = "User not found"
MSG_EMAIL_EXISTS = "Email already exists"
MSG_INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class UserError:
    code: UserErrorCode
    message: str

    @classmethod
    def validation(cls, message: str) -> "UserError":
        return cls(UserErrorCode.VALIDATION_ERROR, message)

    @classmethod
    def forbidden(cls, message: str) -> "UserError":
        return cls(UserErrorCode.FORBIDDEN, message)

    @classmethod
    def not_found(cls) -> "UserError":
        return cls(UserErrorCode.NOT_FOUND, MSG_USER_NOT_FOUND)

    @classmethod
    def email_exists(cls) -> "UserError":
        return cls(UserErrorCode.CONFLICT, MSG_EMAIL_EXISTS)

    @classmethod
    def invalid_credentials(cls) -> "UserError":
        return cls(UserErrorCode.UNAUTHENTICATED, MSG_INVALID_CREDENTIALS)


@dataclass
class UserResult:
    """
    Resultado para casos de uso que retornan un único usuario.

    Contrato:
      - error is None => user presente
      - error != None => user None
    """

    user: User | None = None
    error: UserError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    error: UserError | None = None


@dataclass
class AuthResult:
    """Registro / login: usuario + access token emitido."""

    user: User | None = None
    token: str | None = None
    expires_in: int | None = None
    error: UserError | None = None


@dataclass
class DeleteUserResult:
    deleted: bool = False
    error: UserError | None = None
