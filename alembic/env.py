"""
============================================================
TARJETA CRC — alembic/env.py
============================================================
Responsibilities:
  - Correr las migraciones de la tabla users (online u offline).
  - Tomar DATABASE_URL de los mismos Settings que usa la API, así la
    migración y el servicio apuntan siempre a la misma base.
  - Traducir la URL libpq (postgres:// / postgresql://) al dialecto
    postgresql+psycopg de SQLAlchemy.

Collaborators:
  - usermgmt.crosscutting.config.get_settings
  - SQLAlchemy (make_url, create_engine)

Policy:
  - El servicio no usa ORM: no hay metadata y autogenerate no aplica.
    Cada revisión escribe su DDL con op.*.
============================================================
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import URL, make_url

from usermgmt.crosscutting.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def migration_url() -> URL:
    url = make_url(get_settings().database_url)
    if url.drivername in ("postgres", "postgresql"):
        url = url.set(drivername="postgresql+psycopg")
    return url


def run_migrations_offline() -> None:
    """Emite el SQL sin conectarse (alembic upgrade --sql)."""
    context.configure(
        url=migration_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(migration_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
