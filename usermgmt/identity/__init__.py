"""Identidad: modelo de usuario, passwords (Argon2) y tokens JWT."""

from .users import User, UserChanges, UserRole, UserStatus

__all__ = ["User", "UserChanges", "UserRole", "UserStatus"]
