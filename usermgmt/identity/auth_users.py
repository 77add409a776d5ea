"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación de Usuarios (JWT + Argon2)

Responsabilidades:
    - Hashear/verificar passwords (Argon2).
    - Emitir JWT de acceso con expiración (access token, 7 días por defecto).
    - Decodificar y validar JWT (firma, exp, claims mínimos).
    - Exponer dependencias FastAPI (require_user, require_role,
      require_metrics_access) que resuelven el actor a partir de los claims,
      sin tocar el store.
    - Extraer token desde Authorization: Bearer.

Colaboradores:
    - crosscutting.config.get_settings: secreto y TTL.
    - crosscutting.error_responses: unauthorized (401) / invalid_token y forbidden (403).
    - identity.users: User / UserRole.
    - domain.access_policy.Actor: forma en que los casos de uso ven al actor.

Decisiones de diseño:
    - Verificación stateless: no hay revocación antes del exp.
    - Claims: sub (str), id, email, role, iat, exp, typ.
    - No loguear secretos ni tokens; solo info mínima y segura.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Header, Request

from ..context import set_actor_context
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import forbidden, invalid_token, unauthorized
from ..crosscutting.logger import logger
from ..domain.access_policy import MSG_ADMIN_PRIVILEGES, Actor
from .users import User, UserRole

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_ID: str = "id"
CLAIM_EMAIL: str = "email"
CLAIM_ROLE: str = "role"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

# R: parámetros de costo fijos (defaults de argon2-cffi) para todo el proceso.
_password_hasher = PasswordHasher()


# ---------------------------------------------------------------------------
# Contratos internos
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Settings de auth (snapshot)."""

    jwt_secret: str
    jwt_access_ttl_minutes: int


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Claims validados de un access token (Session Claim)."""

    user_id: int
    email: str
    role: UserRole

    def to_actor(self) -> Actor:
        return Actor(user_id=self.user_id, role=self.role)


def get_auth_settings() -> AuthSettings:
    """Construye un snapshot de settings de auth."""
    s = get_settings()
    return AuthSettings(
        jwt_secret=s.jwt_secret,
        jwt_access_ttl_minutes=s.jwt_access_ttl_minutes,
    )


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2 (salt aleatorio por hash)."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado. Nunca lanza por mismatch/hash corrupto."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return hash_password("not-a-real-password")


def burn_password_check(password: str) -> None:
    """
    Ejecuta una verificación Argon2 descartable.

    Se usa cuando el email no existe para que el tiempo de respuesta no
    revele si la cuenta existe.
    """
    verify_password(password, _dummy_password_hash())


# ---------------------------------------------------------------------------
# Tokens JWT (emitir / decodificar)
# ---------------------------------------------------------------------------


def create_access_token(
    user: User, settings: AuthSettings | None = None
) -> tuple[str, int]:
    """Crea un JWT de acceso firmado.

    Retorna:
        (token, expires_in_seconds)
    """
    auth_settings = settings or get_auth_settings()

    now = datetime.now(timezone.utc)
    expires_in = int(auth_settings.jwt_access_ttl_minutes * 60)

    payload: dict[str, object] = {
        CLAIM_SUB: str(user.id),
        CLAIM_ID: user.id,
        CLAIM_EMAIL: user.email,
        CLAIM_ROLE: user.role.value,
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int((now + timedelta(seconds=expires_in)).timestamp()),
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
    }

    token = jwt.encode(payload, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str, settings: AuthSettings | None = None
) -> TokenPayload:
    """Decodifica y valida un JWT de acceso.

    Errores:
        - 403 "Invalid or expired token." si expiró, la firma no valida,
          faltan claims o el rol no existe.
    """
    auth_settings = settings or get_auth_settings()

    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={
                "require": [CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE, CLAIM_EXP],
            },
        )
    except jwt.ExpiredSignatureError as exc:
        logger.info("Auth: token expired")
        raise invalid_token() from exc
    except jwt.InvalidTokenError as exc:
        logger.info("Auth: token rejected", extra={"reason": type(exc).__name__})
        raise invalid_token() from exc

    token_type = payload.get(CLAIM_TYP)
    if token_type is not None and token_type != TOKEN_TYPE_ACCESS:
        raise invalid_token()

    try:
        user_id = int(payload[CLAIM_SUB])
        role = UserRole(str(payload[CLAIM_ROLE]))
    except (TypeError, ValueError) as exc:
        raise invalid_token() from exc

    email = payload.get(CLAIM_EMAIL)
    if not email:
        raise invalid_token()

    return TokenPayload(user_id=user_id, email=str(email), role=role)


# ---------------------------------------------------------------------------
# Extracción de token
# ---------------------------------------------------------------------------


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def authenticate_request(request: Request, authorization: str | None) -> TokenPayload:
    """Resuelve los claims del request o falla con 401/403."""
    token = extract_bearer_token(authorization)
    if not token:
        raise unauthorized()

    claims = decode_access_token(token)
    request.state.user = claims
    set_actor_context(str(claims.user_id))
    return claims


def require_user() -> Callable:
    """Dependency FastAPI: requiere un JWT válido."""

    def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> TokenPayload:
        return authenticate_request(request, authorization)

    return dependency


def require_role(*roles: UserRole | str) -> Callable:
    """Dependency FastAPI: requiere JWT válido con alguno de los roles dados."""
    required = frozenset(UserRole(role) for role in roles)

    def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> TokenPayload:
        claims = authenticate_request(request, authorization)
        if claims.role not in required:
            raise forbidden(
                MSG_ADMIN_PRIVILEGES
                if required == {UserRole.ADMIN}
                else "Access denied. Insufficient role."
            )
        return claims

    return dependency


def require_metrics_access() -> Callable:
    """
    Dependency FastAPI para /metrics.

    - METRICS_REQUIRE_AUTH=false: acceso libre.
    - METRICS_REQUIRE_AUTH=true: requiere JWT válido con rol Admin.
    """

    def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> None:
        if not get_settings().metrics_require_auth:
            return None
        claims = authenticate_request(request, authorization)
        if claims.role != UserRole.ADMIN:
            raise forbidden(MSG_ADMIN_PRIVILEGES)
        return None

    return dependency
