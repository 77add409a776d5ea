"""
Name: Demo Users Seed Script

Responsibilities:
  - Ensure the demo Admin / Manager / User accounts exist in PostgreSQL
  - Optionally wipe every user first (--force)
  - Refuse to run against a production environment
"""

from __future__ import annotations

import argparse
import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from usermgmt.application.dev_seed_users import SEED_ACCOUNTS, seed_users  # noqa: E402
from usermgmt.crosscutting.config import get_settings  # noqa: E402
from usermgmt.identity.auth_users import hash_password  # noqa: E402
from usermgmt.infrastructure.db.pool import close_pool, init_pool  # noqa: E402
from usermgmt.infrastructure.repositories import PostgresUserRepository  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(description="Seed demo users (one per role).")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Delete ALL existing users before seeding",
    )
    parser.add_argument(
        "--password",
        help="Password for the demo accounts (default: DEV_SEED_PASSWORD)",
    )
    return parser.parse_args(argv)


def main() -> None:
    args = _parse_args()
    settings = get_settings()
    if settings.is_production():
        raise SystemExit("Refusing to seed demo users in production.")

    init_pool(
        database_url=settings.database_url,
        min_size=1,
        max_size=2,
    )
    try:
        created = seed_users(
            PostgresUserRepository(),
            password=args.password or settings.dev_seed_password,
            password_hasher=hash_password,
            force=args.force,
        )
    finally:
        close_pool()

    print(f"Seed complete: {len(created)} created, {len(SEED_ACCOUNTS)} expected.")
    for user in created:
        print(f"  {user.role.value:<8} {user.email}")


if __name__ == "__main__":
    main()
