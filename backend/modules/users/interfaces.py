"""
Users module interface.

The auth, usage and chat modules depend on IUserRepository rather than a
concrete store, so tests run against the in-memory implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import User


@runtime_checkable
class IUserRepository(Protocol):
    """
    Storage contract for user records.

    All writes after creation go through update(), which is a
    compare-and-swap on User.version.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        """
        Get a user by ID.

        Returns:
            User if found, None otherwise
        """
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Get a user by email (case-insensitive).

        Returns:
            User if found, None otherwise
        """
        ...

    def create(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            EmailAlreadyExistsError: If the email is already registered
        """
        ...

    def update(self, user: User) -> User:
        """
        Persist `user` if the stored version still equals `user.version`.

        Returns:
            The stored user with its version incremented

        Raises:
            ConcurrentUpdateError: If the stored version has moved on
            UserNotFoundError: If the user no longer exists
        """
        ...
