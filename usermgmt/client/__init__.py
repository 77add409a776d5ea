"""Cliente HTTP de la API de usuarios (httpx) con sesión explícita."""

from .api import ApiClientError, UserManagementClient
from .session import RemoteUser, SessionContext

__all__ = ["ApiClientError", "RemoteUser", "SessionContext", "UserManagementClient"]
