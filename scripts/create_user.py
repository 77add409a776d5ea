"""
Name: User Bootstrap Script

Responsibilities:
  - Create one user (idempotent on email)
  - Hash passwords with Argon2
  - Store user in PostgreSQL
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys

import psycopg

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from usermgmt.identity.auth_users import hash_password  # noqa: E402
from usermgmt.identity.users import UserRole, UserStatus  # noqa: E402

MIN_PASSWORD_LENGTH = 6


def _require_database_url() -> str:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is required to create a user.")
    return db_url


def _prompt(label: str) -> str:
    value = input(f"{label}: ").strip()
    if not value:
        raise SystemExit(f"{label} is required.")
    return value


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password is required.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(description="Create a user (idempotent).")
    parser.add_argument("--name", help="Display name")
    parser.add_argument("--email", help="User email (surrounding spaces trimmed)")
    parser.add_argument(
        "--password",
        help="User password (omit to be prompted securely)",
    )
    parser.add_argument(
        "--role",
        default=UserRole.ADMIN.value,
        choices=[role.value for role in UserRole],
        help="User role (default: Admin)",
    )
    parser.add_argument(
        "--inactive",
        action="store_true",
        help="Create user as Inactive",
    )
    return parser.parse_args(argv)


def _maybe_create_user(
    db_url: str, *, name: str, email: str, password: str, role: str, status: str
) -> None:
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT id, role, status FROM users WHERE email = %s",
                (email,),
            )
            row = cur.fetchone()
            if row:
                print(
                    "User already exists: "
                    f"id={row[0]} email={email} role={row[1]} status={row[2]}"
                )
                return

            cur.execute(
                """
                INSERT INTO users (name, email, password_hash, role, status)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING id
                """,
                (name, email, hash_password(password), role, status),
            )
            user_id = cur.fetchone()[0]
            conn.commit()
            print(f"Created user: id={user_id} email={email} role={role}")


def main() -> None:
    args = _parse_args()
    db_url = _require_database_url()
    name = args.name.strip() if args.name else _prompt("Name")
    email = args.email.strip() if args.email else _prompt("Email")
    password = args.password or _prompt_password()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise SystemExit(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    _maybe_create_user(
        db_url,
        name=name,
        email=email,
        password=password,
        role=args.role,
        status=UserStatus.INACTIVE.value if args.inactive else UserStatus.ACTIVE.value,
    )


if __name__ == "__main__":
    main()
