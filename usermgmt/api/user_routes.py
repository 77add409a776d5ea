"""
===============================================================================
TARJETA CRC — api/user_routes.py
===============================================================================

Class/Module:
    Users Router

Responsibilities:
    - Exponer CRUD de usuarios bajo /api/users.
    - Convertir TokenPayload (claims) -> Actor de la policy.
    - Traducir UserError -> RFC7807.
    - Registrar auditoría de create / update / delete.

Collaborators:
    - usermgmt.application.usecases (List/Get/Create/Update/Delete)
    - usermgmt.identity.auth_users (require_user, require_role)
    - usermgmt.audit.emit_audit_event
    - usermgmt.container (factories DI)
    - schemas (DTOs Pydantic)

Patterns:
    - Controller / Router
    - Adapter (HTTP -> UseCase)
    - Error Mapping

Notas:
    - La visibilidad y la edición se deciden en domain.access_policy; el
      router no repite reglas de rol salvo el gate Admin del alta.
===============================================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from ..application.usecases import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    UpdateUserUseCase,
)
from ..audit import (
    AUDIT_USERS_CREATE,
    AUDIT_USERS_DELETE,
    AUDIT_USERS_UPDATE,
    emit_audit_event,
)
from ..container import (
    get_create_user_use_case,
    get_delete_user_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_update_user_use_case,
)
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import TokenPayload, require_role, require_user
from ..identity.users import UserRole
from .error_mapping import raise_user_error
from .schemas import CreateUserReq, MessageRes, UpdateUserReq, UserRes, to_user_res

router = APIRouter(prefix="/users", tags=["users"], responses=OPENAPI_ERROR_RESPONSES)

MSG_USER_DELETED = "User deleted successfully"

# R: users.id es INTEGER en Postgres; fuera de rango es input inválido, no 500.
MAX_USER_ID = 2**31 - 1
UserIdPath = Annotated[int, Path(ge=1, le=MAX_USER_ID)]


@router.get("", response_model=list[UserRes])
def list_users(
    claims: TokenPayload = Depends(require_user()),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
):
    result = use_case.execute(claims.to_actor())
    if result.error is not None:
        raise_user_error(result.error)
    return [to_user_res(user) for user in result.users]


@router.get("/{user_id}", response_model=UserRes)
def get_user(
    user_id: UserIdPath,
    claims: TokenPayload = Depends(require_user()),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
):
    result = use_case.execute(user_id, claims.to_actor())
    if result.error is not None:
        raise_user_error(result.error)
    return to_user_res(result.user)


@router.post("", response_model=UserRes, status_code=201)
def create_user(
    req: CreateUserReq,
    claims: TokenPayload = Depends(require_role(UserRole.ADMIN)),
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
):
    result = use_case.execute(
        claims.to_actor(),
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
        status=req.status,
    )
    if result.error is not None:
        raise_user_error(result.error)

    emit_audit_event(
        action=AUDIT_USERS_CREATE,
        claims=claims,
        target_id=result.user.id,
        metadata={"role": result.user.role.value},
    )
    return to_user_res(result.user)


@router.put("/{user_id}", response_model=UserRes)
def update_user(
    user_id: UserIdPath,
    req: UpdateUserReq,
    claims: TokenPayload = Depends(require_user()),
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
):
    result = use_case.execute(
        user_id,
        claims.to_actor(),
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
        status=req.status,
    )
    if result.error is not None:
        raise_user_error(result.error)

    emit_audit_event(
        action=AUDIT_USERS_UPDATE,
        claims=claims,
        target_id=user_id,
        metadata={"fields": sorted(req.model_dump(exclude_none=True))},
    )
    return to_user_res(result.user)


@router.delete("/{user_id}", response_model=MessageRes)
def delete_user(
    user_id: UserIdPath,
    claims: TokenPayload = Depends(require_user()),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
):
    result = use_case.execute(user_id, claims.to_actor())
    if result.error is not None:
        raise_user_error(result.error)

    emit_audit_event(action=AUDIT_USERS_DELETE, claims=claims, target_id=user_id)
    return MessageRes(message=MSG_USER_DELETED)
