"""
User repositories.

Provides an in-memory implementation (development and tests) and a
Supabase-backed implementation of IUserRepository. Both store the
refresh/device token lists, preferences, usage counters and subscription
inline on the user row.
"""

import logging
from typing import Any, Callable, Optional

from shared.exceptions import ConcurrentUpdateError
from shared.models import User, utc_now
from shared.repository import BaseRepository

from .exceptions import EmailAlreadyExistsError, UserNotFoundError
from .interfaces import IUserRepository


logger = logging.getLogger(__name__)

USERS_TABLE = "users"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class InMemoryUserRepository:
    """
    User storage backed by a dict.

    Callers always receive copies, so mutating a returned User never
    changes stored state without going through update().
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = normalize_email(email)
        for user in self._users.values():
            if user.email == wanted:
                return user.model_copy(deep=True)
        return None

    def create(self, user: User) -> User:
        email = normalize_email(user.email)
        if self.get_by_email(email) is not None:
            raise EmailAlreadyExistsError(email)
        stored = user.model_copy(update={"email": email, "version": 1}, deep=True)
        self._users[stored.id] = stored
        return stored.model_copy(deep=True)

    def update(self, user: User) -> User:
        current = self._users.get(user.id)
        if current is None:
            raise UserNotFoundError(user.id)
        if current.version != user.version:
            raise ConcurrentUpdateError("user", user.id)
        stored = user.model_copy(
            update={"version": user.version + 1, "updated_at": utc_now()},
            deep=True,
        )
        self._users[stored.id] = stored
        return stored.model_copy(deep=True)

    def count(self) -> int:
        return len(self._users)


class SupabaseUserRepository(BaseRepository[User]):
    """
    Repository for the `users` table.

    Nested structures (preferences, usage, subscription, token lists) are
    jsonb columns. update() filters on both id and version, so an empty
    result means another writer got there first.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        result = self._db.table(USERS_TABLE).select("*").eq("id", user_id).execute()
        row = self._first(result)
        return self._map_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        result = (
            self._db.table(USERS_TABLE)
            .select("*")
            .eq("email", normalize_email(email))
            .execute()
        )
        row = self._first(result)
        return self._map_to_user(row) if row else None

    def create(self, user: User) -> User:
        email = normalize_email(user.email)
        if self.get_by_email(email) is not None:
            raise EmailAlreadyExistsError(email)
        data = self._to_row(user.model_copy(update={"email": email, "version": 1}))
        result = self._db.table(USERS_TABLE).insert(data).execute()
        return self._map_to_user(result.data[0])

    def update(self, user: User) -> User:
        data = self._to_row(
            user.model_copy(update={"version": user.version + 1, "updated_at": utc_now()})
        )
        result = (
            self._db.table(USERS_TABLE)
            .update(data)
            .eq("id", user.id)
            .eq("version", user.version)
            .execute()
        )
        row = self._first(result)
        if row is None:
            if self.get_by_id(user.id) is None:
                raise UserNotFoundError(user.id)
            raise ConcurrentUpdateError("user", user.id)
        return self._map_to_user(row)

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_row(user: User) -> dict[str, Any]:
        return user.model_dump(mode="json")

    @staticmethod
    def _map_to_user(data: dict[str, Any]) -> User:
        return User.model_validate(data)


def update_user(
    repository: IUserRepository,
    user_id: str,
    mutate: Callable[[User], None],
    attempts: int = 3,
) -> User:
    """
    Read-modify-write a user with compare-and-swap retries.

    `mutate` receives a fresh copy on every attempt and edits it in place.
    Exceptions raised by `mutate` abort the update without writing.

    Raises:
        UserNotFoundError: If the user does not exist
        ConcurrentUpdateError: If every attempt lost the race
    """
    for attempt in range(1, attempts + 1):
        user = repository.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        mutate(user)
        try:
            return repository.update(user)
        except ConcurrentUpdateError:
            if attempt == attempts:
                raise
            logger.debug("Retrying update of user %s after version conflict", user_id)
    raise ConcurrentUpdateError("user", user_id)
