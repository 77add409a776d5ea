"""
============================================================
TARJETA CRC
============================================================
Class: usermgmt.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de UserRepository (Postgres e InMemory)
  en un único punto de importación.

Collaborators:
- Repositorio Postgres (SQL crudo, psycopg)
- Repositorio InMemory (testing / local)
============================================================
"""

from .in_memory import InMemoryUserRepository
from .postgres import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "InMemoryUserRepository",
]
