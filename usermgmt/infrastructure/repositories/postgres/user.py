"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Cargar usuarios (por email / por id / listados por rol).
  - Crear, actualizar parcialmente y borrar usuarios.
  - Ejecutar SQL parametrizado contra la tabla `users` (contrato con migraciones).
  - Mapear filas crudas -> entidad `User` validando UserRole / UserStatus.
  - Traducir la violación de unicidad de email a DuplicateEmailError.
  - Exponer el resto de fallos como DatabaseError con logging estructurado.

Collaborators:
  - psycopg_pool.ConnectionPool (pool de conexiones)
  - infrastructure.db.pool.get_pool (pool global por defecto)
  - identity.users.User / UserChanges / UserRole / UserStatus
  - crosscutting.exceptions.DatabaseError / DuplicateEmailError

Constraints / Notes:
  - Repositorio puro: NO define reglas de negocio (policy de roles, etc.).
  - Retorna None cuando no existe el recurso (no exception por "not found").
  - SQL parametrizado siempre (nunca interpolar input de usuario).
  - Orden estable en listados: id ASC.
============================================================
"""

from __future__ import annotations

from typing import Collection, Iterable, List, Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, DuplicateEmailError
from ....crosscutting.logger import logger
from ....identity.users import User, UserChanges, UserRole, UserStatus
from ...db.pool import get_pool

# R: Lista explícita de columnas para mantener el contrato estable con migraciones.
_USER_COLUMNS = "id, name, email, password_hash, role, status, created_at, updated_at"

_USER_ORDER_BY = "id ASC"

# R: columnas que update_user puede tocar (whitelist; nunca input del usuario).
_UPDATABLE_COLUMNS = ("name", "email", "password_hash", "role", "status")


def _row_to_user(row: tuple) -> User:
    """
    Convierte una fila de `users` a entidad `User`.

    Role/status casting estricto: si el valor no matchea el enum -> DatabaseError.
    """
    try:
        role = UserRole(row[4])
        status = UserStatus(row[5])
    except ValueError as exc:
        raise DatabaseError(
            f"Invalid role/status in database: {row[4]}/{row[5]}"
        ) from exc

    return User(
        id=row[0],
        name=row[1],
        email=row[2],
        password_hash=row[3],
        role=role,
        status=status,
        created_at=row[6],
        updated_at=row[7],
    )


def _to_db_value(value: object) -> object:
    if isinstance(value, (UserRole, UserStatus)):
        return value.value
    return value


class PostgresUserRepository:
    """
    Implementación PostgreSQL de UserRepository.

    El pool es inyectable (tests); si es None se usa el singleton global.
    """

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    # =========================================================
    # Helpers internos: ejecución + errores consistentes
    # =========================================================
    def _get_pool(self) -> ConnectionPool:
        return self._pool if self._pool is not None else get_pool()

    def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object],
        log_msg: str,
        log_extra: dict[str, object],
        email: str | None = None,
    ) -> tuple | None:
        """
        Ejecuta una sentencia y devuelve fetchone().

        - UniqueViolation -> DuplicateEmailError (único constraint único: email).
        - Cualquier otro fallo -> DatabaseError (con log + stacktrace).
        """
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except pg_errors.UniqueViolation as exc:
            logger.warning(
                "PostgresUserRepository: email already exists",
                extra={**log_extra},
            )
            raise DuplicateEmailError(email or "", original_error=exc) from exc
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        log_msg: str,
        log_extra: dict[str, object],
    ) -> list[tuple]:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    # =========================================================
    # Lectura
    # =========================================================
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Match exacto (case-sensitive), igual que el constraint único."""
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            params=(email,),
            log_msg="PostgresUserRepository: get_user_by_email failed",
            log_extra={},
        )
        return _row_to_user(row) if row else None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            log_msg="PostgresUserRepository: get_user_by_id failed",
            log_extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None

    def list_users(self, *, roles: Collection[UserRole] | None = None) -> List[User]:
        if roles is not None and not roles:
            return []

        if roles is None:
            query = f"SELECT {_USER_COLUMNS} FROM users ORDER BY {_USER_ORDER_BY}"
            params: tuple = ()
        else:
            query = f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE role = ANY(%s)
                ORDER BY {_USER_ORDER_BY}
            """
            params = (sorted(r.value for r in roles),)

        rows = self._fetchall(
            query=query,
            params=params,
            log_msg="PostgresUserRepository: list_users failed",
            log_extra={"roles": params[0] if params else "all"},
        )
        return [_row_to_user(r) for r in rows]

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
        row = self._fetchone(
            query=f"""
                INSERT INTO users (name, email, password_hash, role, status)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(name, email, password_hash, role.value, status.value),
            log_msg="PostgresUserRepository: create_user failed",
            log_extra={"role": role.value},
            email=email,
        )
        if not row:
            raise DatabaseError(
                "PostgresUserRepository: create_user failed (no row returned)"
            )
        return _row_to_user(row)

    def update_user(self, user_id: int, changes: UserChanges) -> Optional[User]:
        """
        Update dinámico: SET solo con los campos presentes + updated_at = now().

        Sin cambios => devuelve el estado actual (si existe).
        """
        values = changes.as_dict()
        updates = [f"{col} = %s" for col in _UPDATABLE_COLUMNS if col in values]
        params: list[object] = [
            _to_db_value(values[col]) for col in _UPDATABLE_COLUMNS if col in values
        ]

        if not updates:
            return self.get_user_by_id(user_id)

        updates.append("updated_at = now()")
        params.append(user_id)

        # updates sale de la whitelist, el f-string es seguro.
        row = self._fetchone(
            query=f"""
                UPDATE users
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=params,
            log_msg="PostgresUserRepository: update_user failed",
            log_extra={"user_id": user_id, "fields": sorted(values)},
            email=changes.email,
        )
        return _row_to_user(row) if row else None

    def delete_user(self, user_id: int) -> bool:
        row = self._fetchone(
            query="DELETE FROM users WHERE id = %s RETURNING id",
            params=(user_id,),
            log_msg="PostgresUserRepository: delete_user failed",
            log_extra={"user_id": user_id},
        )
        return row is not None

    def delete_all_users(self) -> int:
        rows = self._fetchall(
            query="DELETE FROM users RETURNING id",
            log_msg="PostgresUserRepository: delete_all_users failed",
            log_extra={},
        )
        return len(rows)

    def ping(self) -> bool:
        row = self._fetchone(
            query="SELECT 1",
            params=(),
            log_msg="PostgresUserRepository: ping failed",
            log_extra={},
        )
        return row is not None
