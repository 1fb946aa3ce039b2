"""
Authentication module interfaces.

The service depends on these protocols, not on Supabase directly, so the
in-memory implementations can stand in during tests and local development.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import UserType

from .models import CodePurpose, Identity, OneTimeCode


@runtime_checkable
class IIdentityRepository(Protocol):
    """Access to the workers / households / admins tables."""

    def get_by_id(self, user_type: UserType, user_id: str) -> Optional[Identity]:
        ...

    def get_by_email(self, user_type: UserType, email: str) -> Optional[Identity]:
        ...

    def email_exists(self, user_type: UserType, email: str) -> bool:
        ...

    def phone_exists(self, user_type: UserType, phone: str) -> bool:
        ...

    def create(self, user_type: UserType, data: dict[str, Any]) -> Identity:
        """
        Insert a new identity row.

        Args:
            user_type: Which role table to insert into
            data: Column values including ``password_hash``

        Returns:
            The created Identity
        """
        ...

    def update(self, user_type: UserType, user_id: str, fields: dict[str, Any]) -> Optional[Identity]:
        ...

    def update_password(self, user_type: UserType, user_id: str, password_hash: str) -> None:
        ...

    def mark_verified(
        self,
        user_type: UserType,
        *,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        """Set ``verification_status=verified`` and ``status=active``."""
        ...


@runtime_checkable
class IOneTimeCodeRepository(Protocol):
    """Storage for OTP codes or verification tokens."""

    def invalidate_unused(self, identifier: str, purpose: CodePurpose) -> int:
        """Mark every unconsumed code for (identifier, purpose) as used."""
        ...

    def insert(
        self,
        *,
        identifier: str,
        code: str,
        purpose: CodePurpose,
        user_type: UserType,
        expires_at: datetime,
        user_id: Optional[str] = None,
    ) -> OneTimeCode:
        ...

    def find_unused(self, identifier: str, code: str, purpose: CodePurpose) -> Optional[OneTimeCode]:
        ...

    def find_unused_by_code(self, code: str, purpose: CodePurpose) -> Optional[OneTimeCode]:
        ...

    def mark_used(self, code_id: str) -> None:
        ...


@runtime_checkable
class IAuditLog(Protocol):
    """Best-effort audit trail of auth events."""

    def record(
        self,
        action: str,
        *,
        user_id: Optional[str] = None,
        user_type: Optional[UserType] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        ...
