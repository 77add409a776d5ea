"""
===============================================================================
USE CASE: Register User (self-service sign-up)
===============================================================================

Business Goal:
    Permitir que cualquier persona cree su propia cuenta con rol User y
    quede autenticada (token emitido en la misma respuesta).

Invariantes:
    - name, email y password son obligatorios.
    - password respeta el largo mínimo configurado.
    - El email no puede existir (pre-chequeo + constraint del store). Se
      chequea antes que el rol: un email tomado es CONFLICT con cualquier rol.
    - El rol pedido solo puede ser ausente o User (Admin/Manager -> FORBIDDEN).
    - Toda cuenta registrada nace Active.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    RegisterUserUseCase

Collaborators:
    - UserRepository: get_user_by_email / create_user
    - access_policy.decide_registration_role
    - password_hasher / token_issuer (inyectados desde container)
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from ....crosscutting.exceptions import DuplicateEmailError
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_policy_denial
from ....domain.access_policy import decide_registration_role
from ....domain.repositories import UserRepository
from ....identity.users import User, UserRole, UserStatus
from .user_inputs import MSG_REQUIRED_FIELDS, check_email, check_password, clean
from .user_results import AuthResult, UserError


class RegisterUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        *,
        password_hasher: Callable[[str], str],
        token_issuer: Callable[[User], tuple[str, int]],
        password_min_length: int = 6,
    ) -> None:
        self._users = user_repository
        self._hash = password_hasher
        self._issue_token = token_issuer
        self._password_min_length = password_min_length

    def execute(
        self,
        *,
        name: str | None,
        email: str | None,
        password: str | None,
        role: UserRole | None = None,
    ) -> AuthResult:
        name = clean(name)
        email = clean(email)
        if not name or not email or not password:
            return AuthResult(error=UserError.validation(MSG_REQUIRED_FIELDS))

        error = check_password(password, self._password_min_length) or check_email(
            email
        )
        if error is not None:
            return AuthResult(error=error)

        if self._users.get_user_by_email(email) is not None:
            return AuthResult(error=UserError.email_exists())

        decision = decide_registration_role(role)
        if not decision.allowed:
            record_policy_denial("register")
            logger.warning(
                "Register rejected: privileged role requested",
                extra={"requested_role": role.value if role else None},
            )
            return AuthResult(error=UserError.forbidden(decision.reason or ""))

        try:
            user = self._users.create_user(
                name=name,
                email=email,
                password_hash=self._hash(password),
                role=UserRole.USER,
                status=UserStatus.ACTIVE,
            )
        except DuplicateEmailError:
            # Carrera: otro registro ganó entre el pre-chequeo y el insert.
            return AuthResult(error=UserError.email_exists())

        token, expires_in = self._issue_token(user)
        return AuthResult(user=user, token=token, expires_in=expires_in)
