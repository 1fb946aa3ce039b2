"""
Shared infrastructure for HouseHelp backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- store: Key/value store used for short-lived counters and tokens

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    HouseHelpError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    RateLimitError,
    ExternalServiceError,
    ConfigurationError,
)
from .models import UserType, AccountStatus, VerificationStatus
from .store import KeyValueStore, InMemoryStore

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "HouseHelpError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "ExternalServiceError",
    "ConfigurationError",
    "UserType",
    "AccountStatus",
    "VerificationStatus",
    "KeyValueStore",
    "InMemoryStore",
]
