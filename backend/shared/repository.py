"""
Base repository for Supabase tables.

Subclasses own their queries and map rows to pydantic models; this class
only holds the client and the row helpers they share.
"""

from datetime import datetime, timezone
from typing import Any, Optional, TypeVar, Generic
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Example:
        class IdentityRepository(BaseRepository[Identity]):
            def get_by_id(self, user_type, user_id) -> Optional[Identity]:
                row = self._first(
                    self._db.table(user_type.table).select("*").eq("id", user_id).execute()
                )
                return self._map_to_identity(row, user_type) if row else None
    """

    def __init__(self, db: Client) -> None:
        self._db = db

    @staticmethod
    def _first(result: Any) -> Optional[dict[str, Any]]:
        """Return the first row of a query result, or None."""
        if not result.data:
            return None
        return result.data[0]

    @staticmethod
    def _count(result: Any) -> int:
        return len(result.data or [])

    @staticmethod
    def _timestamp(value: Any) -> Optional[datetime]:
        """
        Parse a timestamptz column into an aware datetime.

        PostgREST returns ISO strings, sometimes with a ``Z`` suffix; naive
        values are taken as UTC.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            parsed = value
        else:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
