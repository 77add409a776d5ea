"""
===============================================================================
TARJETA CRC — usermgmt/audit.py (Emisión de auditoría)
===============================================================================

Responsabilidades:
  - Construir eventos de auditoría con formato consistente
    (actor / action / target / metadata).
  - Emitirlos como registros estructurados en el logger del servicio (audit=True).
  - Sanear metadata a tipos serializables antes de loguear.

Colaboradores:
  - identity.auth_users.TokenPayload (actor)
  - crosscutting.logger (JSONFormatter + redacción)

Decisiones de seguridad:
  - No se guarda PII innecesaria: el actor va como user:{id} + rol.
  - Metadata pasa por el redactor del logger (password/token nunca salen).
===============================================================================
"""

from __future__ import annotations

from typing import Any

from .crosscutting.logger import logger
from .identity.auth_users import TokenPayload

AUDIT_AUTH_REGISTER = "auth.register"
AUDIT_AUTH_LOGIN = "auth.login"
AUDIT_AUTH_LOGIN_FAILED = "auth.login_failed"
AUDIT_USERS_CREATE = "users.create"
AUDIT_USERS_UPDATE = "users.update"
AUDIT_USERS_DELETE = "users.delete"


def _actor_from_claims(claims: TokenPayload | None) -> str:
    """
    Formato:
      - user:{id}
      - anonymous
    """
    if claims is None:
        return "anonymous"
    return f"user:{claims.user_id}"


def _sanitize(value: Any) -> Any:
    """Convierte valores a tipos serializables para JSON."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_sanitize(v) for v in value]
    return str(value)


def emit_audit_event(
    *,
    action: str,
    claims: TokenPayload | None = None,
    actor: str | None = None,
    target_id: int | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Emite un evento de auditoría como registro estructurado."""
    event_metadata: dict[str, Any] = {}
    if claims is not None:
        event_metadata["actor_role"] = claims.role.value
    if metadata:
        event_metadata.update(_sanitize(metadata))

    logger.info(
        "audit event",
        extra={
            "audit": True,
            "action": action,
            "actor": actor or _actor_from_claims(claims),
            "target_id": target_id,
            "metadata": event_metadata,
        },
    )
