"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message "humana" (sin filtrar secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  UserServiceError + subclases

Responsabilidades:
  - Estandarizar errores de infraestructura que luego se mapean a HTTP
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - infrastructure/repositories (lanzan DatabaseError / DuplicateEmailError)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class UserServiceError(Exception):
    """Base para errores internos del servicio (error_code + error_id + message)."""

    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class DatabaseError(UserServiceError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class DuplicateEmailError(UserServiceError):
    """
    El store rechazó el email por unicidad.

    Cubre la carrera check-then-act: dos altas simultáneas con el mismo email
    pasan el pre-chequeo y la segunda choca contra el constraint.
    """

    error_code: str = "CONFLICT"

    def __init__(self, email: str, original_error: Exception | None = None):
        super().__init__(
            "Email already exists", original_error=original_error
        )
        self.email = email
