"""
===============================================================================
TARJETA CRC — crosscutting/middleware.py
===============================================================================

Responsabilidades:
  - Correlación: cada request lleva un X-Request-Id (aceptado o generado) que
    se refleja en la respuesta y en el contexto de logging.
  - Una línea de log y una observación de métricas por request.
  - Corte de payloads por encima de MAX_BODY_BYTES con 413 problem+json,
    tanto por Content-Length declarado como por cuerpo chunked.

Colaboradores:
  - usermgmt.context: set_request_context / clear_context
  - crosscutting.metrics.record_request_metrics
  - crosscutting.error_responses.build_problem
===============================================================================
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..context import clear_context, set_request_context
from .config import get_settings
from .error_responses import PROBLEM_JSON_MEDIA_TYPE, ErrorCode, build_problem
from .logger import logger
from .metrics import record_request_metrics

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128

# R: health checks y scraping no ensucian el log de accesos.
UNLOGGED_PATHS = frozenset({"/api/health", "/readyz", "/metrics"})


def resolve_request_id(raw: str | None) -> str:
    """Reusa el id del cliente si es razonable; si no, genera un UUID4."""
    candidate = (raw or "").strip()
    if candidate and len(candidate) <= MAX_REQUEST_ID_LENGTH:
        return candidate
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(
            request_id=request_id, method=request.method, path=request.url.path
        )

        started_at = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("unhandled error while serving request")
            raise
        finally:
            elapsed = time.perf_counter() - started_at
            record_request_metrics(
                endpoint=request.url.path,
                method=request.method,
                status_code=status_code,
                latency_seconds=elapsed,
            )
            if request.url.path not in UNLOGGED_PATHS:
                logger.info(
                    "%s %s -> %s",
                    request.method,
                    request.url.path,
                    status_code,
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(elapsed * 1000, 2),
                    },
                )
            # R: el contexto (incluido actor_id) no sobrevive al request.
            clear_context()


class PayloadTooLarge(Exception):
    def __init__(self, received: int) -> None:
        super().__init__(received)
        self.received = received


class BodyLimitMiddleware:
    """ASGI puro: BaseHTTPMiddleware ya habría leído el cuerpo entero."""

    def __init__(self, app: ASGIApp, max_body_bytes: int | None = None) -> None:
        self.app = app
        self.max_body_bytes = (
            get_settings().max_body_bytes if max_body_bytes is None else max_body_bytes
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_body_bytes:
            logger.warning(
                "Rejected request body by Content-Length",
                extra={
                    "content_length": int(declared),
                    "max_bytes": self.max_body_bytes,
                },
            )
            await self._reject(scope, receive, send)
            return

        response_started = False
        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body") or b"")
                if received > self.max_body_bytes:
                    raise PayloadTooLarge(received)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except PayloadTooLarge as exc:
            if response_started:
                raise
            logger.warning(
                "Rejected streamed request body",
                extra={
                    "received_bytes": exc.received,
                    "max_bytes": self.max_body_bytes,
                },
            )
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope)
        # R: mismo id que ya fijó RequestContextMiddleware, si corre por fuera.
        request_id = getattr(request.state, "request_id", None) or resolve_request_id(
            request.headers.get(REQUEST_ID_HEADER)
        )
        problem = build_problem(
            status=413,
            code=ErrorCode.PAYLOAD_TOO_LARGE,
            detail=(
                "Request body too large. "
                f"Maximum allowed: {self.max_body_bytes} bytes"
            ),
            instance=request.url.path,
            errors=[{"request_id": request_id}],
        )
        response = JSONResponse(
            problem,
            status_code=413,
            media_type=PROBLEM_JSON_MEDIA_TYPE,
            headers={REQUEST_ID_HEADER: request_id},
        )
        await response(scope, receive, send)
