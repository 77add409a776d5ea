"""
===============================================================================
TARJETA CRC — crosscutting/security.py
===============================================================================

Responsabilidades:
  - Headers de hardening en toda respuesta (nosniff, DENY, CSP, referrer).
  - Cache-Control: no-store bajo /api/: las respuestas llevan datos
    personales de usuarios y tokens.
  - HSTS solo en producción y solo si el request llegó por HTTPS (directo o
    vía X-Forwarded-Proto).

Colaboradores:
  - crosscutting.config.get_settings (app_env)

Notas:
  - Fuera de producción la CSP abre el CDN de Swagger para que /docs cargue.
===============================================================================
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .config import get_settings

_SWAGGER_CDN = "https://cdn.jsdelivr.net"

_PRODUCTION_CSP = {
    "default-src": "'self'",
    "script-src": "'self'",
    "style-src": "'self'",
    "img-src": "'self' data:",
    "connect-src": "'self'",
    "frame-ancestors": "'none'",
}

_DEVELOPMENT_CSP = {
    **_PRODUCTION_CSP,
    "script-src": f"'self' 'unsafe-inline' {_SWAGGER_CDN}",
    "style-src": f"'self' 'unsafe-inline' {_SWAGGER_CDN}",
    "img-src": "'self' data: https://fastapi.tiangolo.com",
}

HSTS_VALUE = "max-age=31536000; includeSubDomains"


def content_security_policy(is_production: bool) -> str:
    directives = _PRODUCTION_CSP if is_production else _DEVELOPMENT_CSP
    return "; ".join(f"{name} {value}" for name, value in directives.items())


def security_headers(
    *, path: str, scheme: str, is_production: bool
) -> dict[str, str]:
    """Headers a fijar para una respuesta a `path` servida por `scheme`."""
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=()",
        "Content-Security-Policy": content_security_policy(is_production),
    }
    if path.startswith("/api/"):
        headers["Cache-Control"] = "no-store"
    if is_production and scheme.lower() == "https":
        headers["Strict-Transport-Security"] = HSTS_VALUE
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, is_production: bool | None = None) -> None:
        super().__init__(app)
        self.is_production = (
            get_settings().is_production() if is_production is None else is_production
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
        response.headers.update(
            security_headers(
                path=request.url.path,
                scheme=scheme or "",
                is_production=self.is_production,
            )
        )
        return response
