"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (body limit, security headers, request context, CORS)
  - Mount auth and users routers under /api
  - Expose health, readiness and metrics endpoints
  - Run the dev seed (demo Admin/Manager/User accounts) when enabled

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler
  - RequestContextMiddleware: Request ID, logging context and metrics
  - auth_routes / user_routes: business endpoints

Constraints:
  - CORS configurable via ALLOWED_ORIGINS env var (comma-separated)
  - No rate limiting
  - Readiness validates the user store only

Notes:
  - Middleware order matters: CORS → RequestContext → SecurityHeaders → BodyLimit → routes
  - /api/health is a liveness probe (no dependencies)
  - /readyz pings the store
  - /metrics exposes Prometheus metrics

Production Readiness:
  - Env validation enforced by Settings (production requires strong JWT_SECRET)
  - Request tracing with X-Request-Id header
  - Structured JSON logging with request correlation
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..application.dev_seed_users import ensure_dev_users
from ..container import get_user_repository
from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import DatabaseError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..crosscutting.security import SecurityHeadersMiddleware
from ..identity.auth_users import hash_password, require_metrics_access
from ..infrastructure.db.pool import close_pool, init_pool
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .user_routes import router as users_router

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Initializes the pool and seeds demo users."""
    settings = get_settings()

    # R: In test envs the container serves the in-memory store; no pool needed.
    use_pool = not settings.is_test_env()
    if use_pool:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        try:
            ensure_dev_users(
                settings,
                user_repo=get_user_repository(),
                password_hasher=hash_password,
            )
        except (RuntimeError, DatabaseError) as e:
            logger.error("Startup failed", extra={"error": str(e)})
            raise

        logger.info(
            "User Management API starting up",
            extra={
                "app_env": settings.app_env,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
                "jwt_ttl_minutes": settings.jwt_access_ttl_minutes,
                "dev_seed_users": settings.dev_seed_users,
            },
        )

        yield

    finally:
        if use_pool:
            close_pool()
        logger.info("User Management API shutting down")


# R: Create FastAPI application instance with API metadata
app = FastAPI(
    title="User Management API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "auth",
            "description": "Registration, login and current session (JWT)",
        },
        {
            "name": "users",
            "description": "Role-governed user CRUD (Admin / Manager / User)",
        },
    ],
)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    from fastapi.openapi.utils import get_openapi

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        routes=app.routes,
        tags=app.openapi_tags,
    )
    openapi_schema["components"] = openapi_schema.get("components", {})
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT access token via Authorization: Bearer <token>.",
        },
    }
    # R: Bearer globally; public endpoints override with an empty list.
    openapi_schema["security"] = [{"BearerAuth": []}]

    public_paths = {
        "/api/health",
        "/readyz",
        "/api/auth/register",
        "/api/auth/login",
    }
    for path, methods in openapi_schema.get("paths", {}).items():
        for operation in methods.values():
            if not isinstance(operation, dict):
                continue
            if path in public_paths:
                operation["security"] = []
                continue
            if path == "/metrics":
                note = "Requires an Admin token when METRICS_REQUIRE_AUTH=true."
                description = operation.get("description", "")
                if note not in description:
                    operation["description"] = f"{description}\n\n{note}".strip()

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


# R: Middleware order (bottom = first to execute):
# 1. CORSMiddleware - handles preflight
# 2. RequestContextMiddleware - sets request_id
# 3. SecurityHeadersMiddleware - OWASP headers
# 4. BodyLimitMiddleware - rejects oversized bodies early

app.add_middleware(BodyLimitMiddleware)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(RequestContextMiddleware)

_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.get_allowed_origins_list(),
    allow_credentials=_settings.cors_allow_credentials,  # R: Secure default: False
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-Request-Id",
    ],
    expose_headers=["X-Request-Id"],
)

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)

# R: Register exception handlers for structured error responses
register_exception_handlers(app)


@app.get("/api/health", tags=["health"])
def health():
    """Liveness probe (no dependencies)."""
    return {"status": "ok", "message": "Server is running"}


@app.get("/readyz", tags=["health"])
def readyz(request: Request):
    """
    Readiness check for the user store.

    Returns:
        ok: True if the store answers
        db: "connected" or "disconnected"
        request_id: Correlation ID for this request
    """
    db_status = "disconnected"
    try:
        if get_user_repository().ping():
            db_status = "connected"
    except DatabaseError as e:
        logger.warning("Ready check: DB unavailable", extra={"error": str(e)})

    return {
        "ok": db_status == "connected",
        "db": db_status,
        "request_id": getattr(request.state, "request_id", None),
    }


@app.get("/metrics", tags=["health"])
def metrics(_auth: None = Depends(require_metrics_access())):
    """Prometheus text format metrics."""
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
