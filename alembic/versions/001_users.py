"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_users (Alembic Migration)

Responsibilities:
  - Crear la tabla users (id SERIAL, name, email, password_hash,
    role, status, created_at, updated_at).
  - UNIQUE sobre email (case-sensitive, tal como se guarda).
  - CHECK CONSTRAINT sobre valores válidos de role y status.

Collaborators:
  - PostgreSQL 14+
  - Alembic (framework de migraciones)
  - infrastructure.repositories.postgres.user (consultas SQL)

Policy:
  - role/status como texto + CHECK (evita acople a enums de DB).
  - updated_at lo refresca el repositorio en cada UPDATE.
============================================================
"""

import sqlalchemy as sa
from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crea la tabla users."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'User'"),
        ),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'Active'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "role IN ('Admin', 'Manager', 'User')", name="ck_users_role"
        ),
        sa.CheckConstraint(
            "status IN ('Active', 'Inactive')", name="ck_users_status"
        ),
    )

    # Listados filtran por rol (visibilidad).
    op.create_index("ix_users_role", "users", ["role"])


def downgrade() -> None:
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
