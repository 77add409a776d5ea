"""
===============================================================================
TARJETA CRC — api/error_mapping.py (UseCase Error -> HTTP RFC7807)
===============================================================================

Responsabilidades:
  - Traducir UserError (application) a AppHTTPException (RFC7807).
  - Centralizar el mapeo para que los routers no repitan la tabla.

Tabla:
  VALIDATION_ERROR -> 400
  UNAUTHENTICATED  -> 401
  FORBIDDEN        -> 403
  NOT_FOUND        -> 404
  CONFLICT         -> 400 (email duplicado)

Colaboradores:
  - application.usecases (UserError, UserErrorCode)
  - crosscutting.error_responses (factories)
===============================================================================
"""

from __future__ import annotations

from typing import NoReturn

from ..application.usecases import UserError, UserErrorCode
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    conflict,
    forbidden,
    internal_error,
    not_found,
    validation_error,
)


def raise_user_error(error: UserError) -> NoReturn:
    """Traduce UserError -> HTTP (siempre lanza)."""
    if error.code == UserErrorCode.VALIDATION_ERROR:
        raise validation_error(error.message)
    if error.code == UserErrorCode.UNAUTHENTICATED:
        raise AppHTTPException(401, ErrorCode.UNAUTHORIZED, error.message)
    if error.code == UserErrorCode.FORBIDDEN:
        raise forbidden(error.message)
    if error.code == UserErrorCode.NOT_FOUND:
        raise not_found(error.message)
    if error.code == UserErrorCode.CONFLICT:
        raise conflict(error.message)

    raise internal_error(error.message)
