"""
Base repository class for database access.

Provides a common abstraction layer for the Supabase-backed repositories,
encapsulating client access and the row/timestamp helpers they share.
"""

from datetime import datetime
from typing import Any, Optional, TypeVar, Generic

from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for Supabase repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints

    Subclasses implement domain-specific data access methods and handle
    dict-to-Pydantic model mapping internally.

    Example:
        class SupabaseUserRepository(BaseRepository[User]):
            def get_by_id(self, user_id: str) -> Optional[User]:
                result = self._db.table("users").select("*").eq("id", user_id).execute()
                if not result.data:
                    return None
                return self._map_to_user(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @staticmethod
    def _first(result: Any) -> Optional[dict[str, Any]]:
        """Return the first row of a query result, or None."""
        if not result.data:
            return None
        return result.data[0]

    @staticmethod
    def _parse_timestamp(value: Any) -> Optional[datetime]:
        """Parse an ISO timestamp column (Supabase returns strings)."""
        if value is None or isinstance(value, datetime):
            return value
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
