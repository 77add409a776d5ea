"""
============================================================
TARJETA CRC — client/session.py
============================================================
Class: SessionContext / RemoteUser

Responsibilities:
  - Mantener el token y el usuario actual del lado cliente
    (explícito, sin estado global).
  - Parsear la representación camelCase de un usuario.

Collaborators:
  - client.api.UserManagementClient (dueño de la sesión)
============================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True, slots=True)
class RemoteUser:
    """Usuario tal como lo devuelve la API (nunca incluye password)."""

    id: int
    name: str
    email: str
    role: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RemoteUser":
        return cls(
            id=int(payload["id"]),
            name=payload["name"],
            email=payload["email"],
            role=payload["role"],
            status=payload["status"],
            created_at=_parse_ts(payload.get("createdAt")),
            updated_at=_parse_ts(payload.get("updatedAt")),
        )


@dataclass
class SessionContext:
    """Token + usuario actual. Vacío = sin sesión."""

    token: str | None = None
    user: RemoteUser | None = None
    expires_in: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def start(self, token: str, user: RemoteUser, expires_in: int | None) -> None:
        self.token = token
        self.user = user
        self.expires_in = expires_in

    def clear(self) -> None:
        self.token = None
        self.user = None
        self.expires_in = None

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
