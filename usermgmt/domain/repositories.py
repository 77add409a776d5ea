"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define the user persistence contract for the application layer (port).
- Keep use cases independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing.

Collaborators
- identity.users: User, UserChanges, UserRole, UserStatus
- infrastructure.repositories: postgres / in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Email uniqueness is enforced by the store: create/update raise
  crosscutting.exceptions.DuplicateEmailError on collision.
"""

from typing import Collection, List, Optional, Protocol

from ..identity.users import User, UserChanges, UserRole, UserStatus


class UserRepository(Protocol):
    """
    R: Interface for user persistence.

    Implementations must provide:
      - Lookup by id / email (exact, case-sensitive match)
      - Listing filtered by role, ordered by id ascending
      - Create / partial update / hard delete
    """

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def list_users(self, *, roles: Collection[UserRole] | None = None) -> List[User]:
        """
        R: List users, optionally restricted to `roles`.

        Notes:
            - roles=None means no filter; an empty collection returns [].
        """
        ...

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        status: UserStatus,
    ) -> User:
        """R: Insert a user. Raises DuplicateEmailError if email is taken."""
        ...

    def update_user(self, user_id: int, changes: UserChanges) -> Optional[User]:
        """
        R: Apply a partial update and refresh updated_at.

        Returns None if the user does not exist. Raises DuplicateEmailError
        if the new email collides with another record.
        """
        ...

    def delete_user(self, user_id: int) -> bool:
        """R: Hard delete. True if a row was removed."""
        ...

    def delete_all_users(self) -> int:
        """R: Wipe the table (dev seed --force). Returns removed count."""
        ...

    def ping(self) -> bool:
        ...
