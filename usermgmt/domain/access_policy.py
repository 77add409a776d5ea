"""
===============================================================================
TARJETA CRC — domain/access_policy.py
===============================================================================

Módulo:
    Política de Acceso a Usuarios (ver / crear / editar / borrar / login)

Responsabilidades:
    - Definir reglas puras de acceso por rol (sin DB, sin FastAPI).
    - Separar "policy" de "repos" (repos solo traen datos, policy decide).
    - Devolver decisiones explícitas (allowed + reason) que los casos de uso
      traducen a errores tipados.

Colaboradores:
    - identity.users.User, UserRole, UserStatus
    - application/usecases/users: consumen estas decisiones.

Reglas:
    - Visibilidad (solo listado): Admin ve todo; Manager ve Manager+User;
      User ve User.
    - Edición: Admin edita a cualquiera; Manager se edita a sí mismo y a cuentas
      User; User solo a sí mismo y solo email/password.
    - Roles: solo Admin asigna Admin, solo Admin cambia a Manager, y ningún
      no-Admin cambia un rol (incluido el propio).
    - Borrado: Admin borra a otros pero no a sí mismo; el resto solo a sí mismo.
    - Roles desconocidos -> ValueError (nunca un "allow" silencioso).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, NoReturn

from ..identity.users import User, UserRole, UserStatus

# ---------------------------------------------------------------------------
# Campos editables
# ---------------------------------------------------------------------------
FIELD_NAME = "name"
FIELD_EMAIL = "email"
FIELD_PASSWORD = "password"
FIELD_ROLE = "role"
FIELD_STATUS = "status"

ALL_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {FIELD_NAME, FIELD_EMAIL, FIELD_PASSWORD, FIELD_ROLE, FIELD_STATUS}
)
SELF_SERVICE_FIELDS: frozenset[str] = frozenset({FIELD_EMAIL, FIELD_PASSWORD})

# ---------------------------------------------------------------------------
# Mensajes (contrato visible para el cliente)
# ---------------------------------------------------------------------------
MSG_ADMIN_PRIVILEGES = "Access denied. Admin privileges required."
MSG_MANAGER_EDIT_DENIED = (
    "Managers can only edit their own account and User role accounts."
)
MSG_USER_EDIT_DENIED = "You can only edit your own account."
MSG_ROLE_ADMIN_DENIED = "Only administrators can set or change roles to Admin."
MSG_ROLE_MANAGER_DENIED = "Only administrators can change roles to Manager."
MSG_ROLE_CHANGE_DENIED = "Only administrators can change user roles."
MSG_SELF_REGISTER_ROLE = (
    "Cannot self-register as Admin or Manager. Please register as User."
)
MSG_CREATE_ADMIN_DENIED = "Only administrators can create Admin role accounts."
MSG_ADMIN_SELF_DELETE = "Admins cannot delete their own account."
MSG_DELETE_OTHERS_DENIED = (
    "You can only delete your own account. "
    "Only administrators can delete other users."
)
MSG_ACCOUNT_INACTIVE = "Account is inactive. Please contact an administrator."


@dataclass(frozen=True, slots=True)
class Actor:
    """Quién ejecuta la operación (derivado de los claims del token)."""

    user_id: int
    role: UserRole

    def is_self(self, target: User) -> bool:
        return self.user_id == target.id


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class EditDecision:
    """Decisión de edición: además del allow, qué campos puede tocar el actor."""

    allowed: bool
    fields: frozenset[str] = field(default_factory=frozenset)
    reason: str | None = None


_ALLOW = Decision(allowed=True)


def _deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def _unhandled_role(role: object) -> NoReturn:
    raise ValueError(f"Unhandled user role: {role!r}")


# ---------------------------------------------------------------------------
# Visibilidad
# ---------------------------------------------------------------------------
def visible_roles(actor_role: UserRole) -> frozenset[UserRole]:
    """Roles cuyos registros aparecen en el listado del actor."""
    if actor_role is UserRole.ADMIN:
        return frozenset(UserRole)
    if actor_role is UserRole.MANAGER:
        return frozenset({UserRole.MANAGER, UserRole.USER})
    if actor_role is UserRole.USER:
        return frozenset({UserRole.USER})
    _unhandled_role(actor_role)


# ---------------------------------------------------------------------------
# Edición
# ---------------------------------------------------------------------------
def decide_edit(actor: Actor, target: User) -> EditDecision:
    """Evalúa si el actor puede editar `target` y con qué campos."""
    if actor.role is UserRole.ADMIN:
        return EditDecision(allowed=True, fields=ALL_EDITABLE_FIELDS)

    if actor.role is UserRole.MANAGER:
        if actor.is_self(target) or target.role is UserRole.USER:
            return EditDecision(allowed=True, fields=ALL_EDITABLE_FIELDS)
        return EditDecision(allowed=False, reason=MSG_MANAGER_EDIT_DENIED)

    if actor.role is UserRole.USER:
        if actor.is_self(target):
            return EditDecision(allowed=True, fields=SELF_SERVICE_FIELDS)
        return EditDecision(allowed=False, reason=MSG_USER_EDIT_DENIED)

    _unhandled_role(actor.role)


def check_role_change(
    actor: Actor, target: User, requested_role: UserRole | None
) -> Decision:
    """
    Sub-regla de escalamiento de rol.

    Se evalúa sobre el rol pedido aunque el campo luego se descarte por no
    estar permitido para el actor.
    """
    if requested_role is None or requested_role is target.role:
        return _ALLOW

    if actor.role is UserRole.ADMIN:
        return _ALLOW

    if requested_role is UserRole.ADMIN:
        return _deny(MSG_ROLE_ADMIN_DENIED)
    if requested_role is UserRole.MANAGER:
        return _deny(MSG_ROLE_MANAGER_DENIED)
    return _deny(MSG_ROLE_CHANGE_DENIED)


def permitted_changes(
    decision: EditDecision, requested: Mapping[str, Any]
) -> dict[str, Any]:
    """Descarta en silencio los campos pedidos que el actor no puede tocar."""
    if not decision.allowed:
        return {}
    return {
        name: value
        for name, value in requested.items()
        if value is not None and name in decision.fields
    }


# ---------------------------------------------------------------------------
# Alta
# ---------------------------------------------------------------------------
def decide_registration_role(requested_role: UserRole | None) -> Decision:
    """Auto-registro: solo se acepta rol ausente o User."""
    if requested_role is None or requested_role is UserRole.USER:
        return _ALLOW
    return _deny(MSG_SELF_REGISTER_ROLE)


def decide_admin_create(actor: Actor, requested_role: UserRole | None) -> Decision:
    """Alta administrativa: reservada a Admin (y un Admin solo lo crea un Admin)."""
    if actor.role is UserRole.ADMIN:
        return _ALLOW
    if requested_role is UserRole.ADMIN:
        return _deny(MSG_CREATE_ADMIN_DENIED)
    return _deny(MSG_ADMIN_PRIVILEGES)


# ---------------------------------------------------------------------------
# Borrado
# ---------------------------------------------------------------------------
def decide_delete(actor: Actor, target: User) -> Decision:
    is_self = actor.is_self(target)

    if actor.role is UserRole.ADMIN:
        return _deny(MSG_ADMIN_SELF_DELETE) if is_self else _ALLOW

    if actor.role in (UserRole.MANAGER, UserRole.USER):
        return _ALLOW if is_self else _deny(MSG_DELETE_OTHERS_DENIED)

    _unhandled_role(actor.role)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------
def decide_login(user: User) -> Decision:
    """Gate posterior a verificar credenciales: cuentas Inactive no entran."""
    if user.status is UserStatus.ACTIVE:
        return _ALLOW
    if user.status is UserStatus.INACTIVE:
        return _deny(MSG_ACCOUNT_INACTIVE)
    raise ValueError(f"Unhandled user status: {user.status!r}")
