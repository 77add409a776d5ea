"""
===============================================================================
TARJETA CRC — api/auth_routes.py (Registro, Login y Sesión)
===============================================================================

Responsabilidades:
  - Exponer /api/auth/register, /api/auth/login y /api/auth/me.
  - Traducir HTTP <-> casos de uso (RegisterUser / LoginUser / GetCurrentUser).
  - Emitir eventos de auditoría para registro y login (exitoso o fallido).

Patrones aplicados:
  - Adapter / Presentation Layer: el router es delgado.
  - Error Mapping centralizado (api/error_mapping.py).

Colaboradores:
  - container: factories de casos de uso
  - identity.auth_users.require_user (JWT -> TokenPayload)
  - audit.emit_audit_event

Notas:
  - No hay logout de servidor: el token es stateless y el cliente lo descarta.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..application.usecases import (
    GetCurrentUserUseCase,
    LoginUserUseCase,
    RegisterUserUseCase,
    UserErrorCode,
)
from ..audit import (
    AUDIT_AUTH_LOGIN,
    AUDIT_AUTH_LOGIN_FAILED,
    AUDIT_AUTH_REGISTER,
    emit_audit_event,
)
from ..container import (
    get_current_user_use_case,
    get_login_user_use_case,
    get_register_user_use_case,
)
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import TokenPayload, require_user
from .error_mapping import raise_user_error
from .schemas import AuthRes, LoginReq, RegisterReq, UserRes, to_user_res

router = APIRouter(prefix="/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)


@router.post("/register", response_model=AuthRes, status_code=201)
def register(
    req: RegisterReq,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    result = use_case.execute(
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
    )
    if result.error is not None:
        raise_user_error(result.error)

    emit_audit_event(
        action=AUDIT_AUTH_REGISTER,
        actor=f"user:{result.user.id}",
        target_id=result.user.id,
    )
    return AuthRes(
        user=to_user_res(result.user),
        token=result.token,
        expires_in=result.expires_in,
    )


@router.post("/login", response_model=AuthRes)
def login(
    req: LoginReq,
    use_case: LoginUserUseCase = Depends(get_login_user_use_case),
):
    result = use_case.execute(email=req.email, password=req.password)
    if result.error is not None:
        if result.error.code != UserErrorCode.VALIDATION_ERROR:
            emit_audit_event(
                action=AUDIT_AUTH_LOGIN_FAILED,
                metadata={"reason": result.error.code.value},
            )
        raise_user_error(result.error)

    emit_audit_event(
        action=AUDIT_AUTH_LOGIN,
        actor=f"user:{result.user.id}",
        target_id=result.user.id,
    )
    return AuthRes(
        user=to_user_res(result.user),
        token=result.token,
        expires_in=result.expires_in,
    )


@router.get("/me", response_model=UserRes)
def me(
    claims: TokenPayload = Depends(require_user()),
    use_case: GetCurrentUserUseCase = Depends(get_current_user_use_case),
):
    result = use_case.execute(claims.to_actor())
    if result.error is not None:
        raise_user_error(result.error)
    return to_user_res(result.user)
