"""
============================================================
TARJETA CRC — client/api.py
============================================================
Class: UserManagementClient

Responsibilities:
  - Consumir /api/auth y /api/users vía httpx.
  - Mantener la sesión (SessionContext) tras register/login.
  - Traducir respuestas de error a ApiClientError con el campo
    "error" del cuerpo RFC7807, tal cual.

Collaborators:
  - httpx (HTTP client)
  - client.session (SessionContext, RemoteUser)

Notas:
  - Logout es solo local: el token es stateless y se descarta.
  - Se puede inyectar un httpx.Client ya configurado (ej: TestClient).
============================================================
"""

from __future__ import annotations

from typing import Any

import httpx

from ..crosscutting.logger import logger
from .session import RemoteUser, SessionContext

DEFAULT_BASE_URL = "http://localhost:5000/api"


class ApiClientError(Exception):
    """La API respondió con error (o con algo que no es JSON)."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UserManagementClient:
    """
    Cliente sincrónico de la API de usuarios.

    Uso:
        with UserManagementClient("http://localhost:5000/api") as client:
            client.login("admin@example.com", "admin123")
            users = client.list_users()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        http_client: httpx.Client | None = None,
        session: SessionContext | None = None,
        timeout_s: float = 10.0,
    ):
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout_s)
        self.session = session or SessionContext()

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "UserManagementClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transporte (interno)
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        fallback_error: str,
    ) -> Any:
        resp = self._http.request(
            method, path, json=json, headers=self.session.auth_headers()
        )
        data = _parse_json(resp)

        if resp.status_code >= 400:
            message = data.get("error") if isinstance(data, dict) else None
            logger.info(
                "API request failed",
                extra={"path": path, "status_code": resp.status_code},
            )
            raise ApiClientError(message or fallback_error, resp.status_code)
        return data

    def _start_session(self, data: dict[str, Any]) -> RemoteUser:
        user = RemoteUser.from_payload(data["user"])
        self.session.start(data["token"], user, data.get("expiresIn"))
        return user

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(
        self, name: str, email: str, password: str, role: str | None = None
    ) -> RemoteUser:
        body: dict[str, Any] = {"name": name, "email": email, "password": password}
        if role is not None:
            body["role"] = role
        data = self._request(
            "POST", "/auth/register", json=body, fallback_error="Failed to register"
        )
        return self._start_session(data)

    def login(self, email: str, password: str) -> RemoteUser:
        data = self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            fallback_error="Failed to login",
        )
        return self._start_session(data)

    def logout(self) -> None:
        self.session.clear()

    def me(self) -> RemoteUser:
        data = self._request("GET", "/auth/me", fallback_error="Failed to fetch profile")
        user = RemoteUser.from_payload(data)
        self.session.user = user
        return user

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self) -> list[RemoteUser]:
        data = self._request("GET", "/users", fallback_error="Failed to fetch users")
        return [RemoteUser.from_payload(item) for item in data]

    def get_user(self, user_id: int) -> RemoteUser:
        data = self._request(
            "GET", f"/users/{user_id}", fallback_error="Failed to fetch user"
        )
        return RemoteUser.from_payload(data)

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        *,
        role: str | None = None,
        status: str | None = None,
    ) -> RemoteUser:
        body = _without_none(
            name=name, email=email, password=password, role=role, status=status
        )
        data = self._request(
            "POST", "/users", json=body, fallback_error="Failed to create user"
        )
        return RemoteUser.from_payload(data)

    def update_user(self, user_id: int, **changes: Any) -> RemoteUser:
        """Campos aceptados: name, email, password, role, status."""
        data = self._request(
            "PUT",
            f"/users/{user_id}",
            json=_without_none(**changes),
            fallback_error="Failed to update user",
        )
        user = RemoteUser.from_payload(data)
        if self.session.user is not None and self.session.user.id == user.id:
            self.session.user = user
        return user

    def delete_user(self, user_id: int) -> str:
        """Borrar la propia cuenta cierra la sesión local."""
        data = self._request(
            "DELETE", f"/users/{user_id}", fallback_error="Failed to delete user"
        )
        if self.session.user is not None and self.session.user.id == user_id:
            self.session.clear()
        return data["message"]


def _without_none(**fields: Any) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


def _parse_json(resp: httpx.Response) -> Any:
    content_type = resp.headers.get("content-type", "")
    if "json" not in content_type:
        raise ApiClientError(
            f"API Error: Expected JSON but received {content_type or 'unknown content type'}",
            resp.status_code,
        )
    return resp.json()
