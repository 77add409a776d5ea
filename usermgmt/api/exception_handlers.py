"""
===============================================================================
TARJETA CRC — api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir excepciones de la aplicación a respuestas HTTP RFC7807.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Tabla:
  DuplicateEmailError     -> 400 CONFLICT ("Email already exists")
  DatabaseError           -> 500 DATABASE_ERROR
  UserServiceError        -> 500 INTERNAL_ERROR
  RequestValidationError  -> 400 VALIDATION_ERROR (JSON inválido, enum inválido)
  AppHTTPException        -> su status
  HTTPException (Starlette) -> su status (404 de ruta, 405...)
  Exception               -> 500 INTERNAL_ERROR (detalle solo fuera de producción)

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: UserServiceError y derivadas
  - crosscutting.config.get_settings (para decidir nivel de detalle)
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    UserServiceError,
)
from ..crosscutting.logger import logger

MSG_INVALID_REQUEST = "Invalid request body"


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _handle_service_error(
    request: Request,
    *,
    exc: UserServiceError,
    code: ErrorCode,
    status_code: int,
) -> JSONResponse:
    """Helper común para errores tipados de servicios."""
    request_id = _request_id_from(request)

    logger.error(
        "Service error",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "request_id": request_id,
            "error_message": exc.message,
        },
    )

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=[{"error_id": exc.error_id}],
    )
    return await app_exception_handler(request, app_exc)


async def duplicate_email_handler(
    request: Request, exc: DuplicateEmailError
) -> JSONResponse:
    # R: carrera de unicidad que escapó del caso de uso; mismo contrato que el pre-chequeo.
    logger.info("Duplicate email rejected by store", extra={"error_id": exc.error_id})
    app_exc = AppHTTPException(
        status_code=400, code=ErrorCode.CONFLICT, detail=exc.message
    )
    return await app_exception_handler(request, app_exc)


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.DATABASE_ERROR, status_code=500
    )


async def service_error_handler(
    request: Request, exc: UserServiceError
) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.INTERNAL_ERROR, status_code=500
    )


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc) or "body", "msg": err.get("msg", "")})
    return errors


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body mal formado o enum inválido -> 400 con detalle por campo."""
    errors = _validation_errors(exc)
    detail = MSG_INVALID_REQUEST
    if errors:
        first = errors[0]
        detail = f"{first['field']}: {first['msg']}"

    app_exc = AppHTTPException(
        status_code=400,
        code=ErrorCode.VALIDATION_ERROR,
        detail=detail,
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


_STATUS_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
}


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """HTTPException del framework (ruta inexistente, método no permitido...)."""
    code = _STATUS_CODES.get(exc.status_code)
    if code is None:
        code = (
            ErrorCode.INTERNAL_ERROR
            if exc.status_code >= 500
            else ErrorCode.VALIDATION_ERROR
        )
    app_exc = AppHTTPException(
        status_code=exc.status_code, code=code, detail=str(exc.detail)
    )
    app_exc.headers = exc.headers
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica (evita filtrar internos en producción).
    """
    request_id = _request_id_from(request)
    settings = get_settings()

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={"error": str(exc)},
    )

    detail = str(exc) if not settings.is_production() else "Internal server error"

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
        errors=[{"request_id": request_id}] if request_id else None,
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - Starlette resuelve por MRO: DuplicateEmailError / DatabaseError
        ganan sobre UserServiceError.
      - Exception genérica queda como fallback (ServerErrorMiddleware).
    """
    app.add_exception_handler(DuplicateEmailError, duplicate_email_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(UserServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
