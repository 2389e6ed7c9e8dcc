"""
Supabase client for the persistent storage backend.

Only used when DATABASE_BACKEND=supabase. The backend connects with the
service-role key and enforces row ownership itself, so every repository
query filters on user_id.
"""

from typing import Optional

from supabase import Client, create_client

from .config import Settings, get_settings

_client: Optional[Client] = None


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Return the process-wide Supabase client, creating it on first use.

    Args:
        settings: Settings to connect with; defaults to get_settings()

    Raises:
        RuntimeError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is unset
    """
    global _client

    if _client is not None:
        return _client

    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY, "
            "or use DATABASE_BACKEND=memory."
        )
    _client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    return _client


def reset_client_cache() -> None:
    """Drop the cached client so the next call reconnects."""
    global _client
    _client = None
