"""
===============================================================================
USE CASE: Login User
===============================================================================

Business Goal:
    Intercambiar email + password por un access token.

Reglas:
    - email y password obligatorios (VALIDATION_ERROR).
    - Email inexistente y password incorrecto devuelven el MISMO error
      (UNAUTHENTICATED); el camino "no existe" igual corre un verify Argon2.
    - Cuenta Inactive con password correcto -> FORBIDDEN.
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_auth_attempt
from ....domain.access_policy import decide_login
from ....domain.repositories import UserRepository
from ....identity.users import User
from .user_inputs import MSG_LOGIN_REQUIRED, clean
from .user_results import AuthResult, UserError


class LoginUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        *,
        password_verifier: Callable[[str, str], bool],
        token_issuer: Callable[[User], tuple[str, int]],
        dummy_verifier: Callable[[str], None] | None = None,
    ) -> None:
        self._users = user_repository
        self._verify = password_verifier
        self._issue_token = token_issuer
        self._dummy_verify = dummy_verifier

    def execute(self, *, email: str | None, password: str | None) -> AuthResult:
        email = clean(email)
        if not email or not password:
            return AuthResult(error=UserError.validation(MSG_LOGIN_REQUIRED))

        user = self._users.get_user_by_email(email)
        if user is None:
            if self._dummy_verify is not None:
                self._dummy_verify(password)
            return self._invalid_credentials()

        if not self._verify(password, user.password_hash):
            return self._invalid_credentials()

        decision = decide_login(user)
        if not decision.allowed:
            record_auth_attempt("inactive")
            logger.warning("Login rejected: inactive account", extra={"user_id": user.id})
            return AuthResult(error=UserError.forbidden(decision.reason or ""))

        record_auth_attempt("success")
        token, expires_in = self._issue_token(user)
        return AuthResult(user=user, token=token, expires_in=expires_in)

    @staticmethod
    def _invalid_credentials() -> AuthResult:
        record_auth_attempt("invalid_credentials")
        return AuthResult(error=UserError.invalid_credentials())
