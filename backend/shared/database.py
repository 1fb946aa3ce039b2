"""
Supabase client for the identity, code and audit tables.

Repositories share one service-role client. Row-level security is
bypassed, so every ownership decision is made by the auth core before a
repository is called.
"""

import logging
from typing import Optional
from supabase import create_client, Client

from .config import get_settings
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_service_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Return the shared service-role client, creating it on first use.

    Raises:
        ConfigurationError: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is unset
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", settings.supabase_url),
                ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Supabase configuration missing: " + ", ".join(missing),
                details={"settings": missing},
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )
        logger.info("Connected identity store to %s", settings.supabase_url)

    return _service_client


def reset_client_cache() -> None:
    """Drop the cached client (tests, or after a settings change)."""
    global _service_client
    _service_client = None
