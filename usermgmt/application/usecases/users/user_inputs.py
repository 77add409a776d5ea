"""
Normalización y validación de inputs compartida por los casos de uso de usuarios.

Notas:
  - El email se recorta pero NO se pasa a minúsculas: la unicidad es
    case-sensitive, igual que el constraint de la tabla.
  - String vacío (tras strip) equivale a "no provisto".
"""

from __future__ import annotations

import re

from .user_results import UserError

MSG_REQUIRED_FIELDS = "Name, email, and password are required"
MSG_LOGIN_REQUIRED = "Email and password are required"
MSG_INVALID_EMAIL = "Email must be a valid email address"

_EMAIL_SHAPE = re.compile(r"^[^@\s]+@[^@\s]+$")


def clean(value: str | None) -> str | None:
    """strip(); vacío -> None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def password_too_short_message(min_length: int) -> str:
    return f"Password must be at least {min_length} characters long"


def check_email(email: str) -> UserError | None:
    if not _EMAIL_SHAPE.match(email):
        return UserError.validation(MSG_INVALID_EMAIL)
    return None


def check_password(password: str, min_length: int) -> UserError | None:
    if len(password) < min_length:
        return UserError.validation(password_too_short_message(min_length))
    return None
