"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Replicar el contrato de PostgresUserRepository:
      - ids autoincrementales (SERIAL)
      - unicidad de email (DuplicateEmailError, como el constraint)
      - listados por rol ordenados por id ASC
      - updated_at refrescado en cada update

Collaborators:
  - identity.users.User / UserChanges / UserRole / UserStatus
  - domain.repositories.UserRepository (contrato a implementar)

Constraints / Notes:
  - Thread-safe: cada operación lee/escribe bajo Lock, así el chequeo de
    unicidad y el alta son atómicos entre sí.
  - Repo puro: NO aplica policy de roles.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Collection, Dict, List, Optional

from ....crosscutting.exceptions import DuplicateEmailError
from ....identity.users import User, UserChanges, UserRole, UserStatus


class InMemoryUserRepository:
    """
    Repositorio in-memory, thread-safe, para usuarios.

    Modelo mental:
    - _users es la "tabla" en memoria (id -> User).
    - _next_id emula la secuencia SERIAL (nunca reutiliza ids).
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        # R: llamar siempre con el lock tomado.
        return any(
            u.email == email and u.id != exclude_id for u in self._users.values()
        )

    # =========================================================
    # Lectura
    # =========================================================
    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    def list_users(self, *, roles: Collection[UserRole] | None = None) -> List[User]:
        with self._lock:
            values = list(self._users.values())
        if roles is not None:
            allowed = set(roles)
            values = [u for u in values if u.role in allowed]
        return sorted(values, key=lambda u: u.id)

    # =========================================================
    # Escritura
    # =========================================================
    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        status: UserStatus,
    ) -> User:
        with self._lock:
            if self._email_taken(email):
                raise DuplicateEmailError(email)

            now = self._now()
            user = User(
                id=self._next_id,
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                status=status,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            self._next_id += 1
            return user

    def update_user(self, user_id: int, changes: UserChanges) -> Optional[User]:
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            if changes.is_empty():
                return current
            if changes.email is not None and self._email_taken(
                changes.email, exclude_id=user_id
            ):
                raise DuplicateEmailError(changes.email)

            updated = replace(current, **changes.as_dict(), updated_at=self._now())
            self._users[user_id] = updated
            return updated

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def delete_all_users(self) -> int:
        with self._lock:
            count = len(self._users)
            self._users.clear()
            return count

    def ping(self) -> bool:
        return True
