"""
Supabase-backed repositories for the identity tables.

Encapsulates all queries against:
- workers / households / admins
- otp_codes / verification_tokens
- audit_logs

Note: These repositories do NOT perform authorization checks.
The service layer is responsible for verifying ownership.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from supabase import Client

from shared.models import AccountStatus, UserType, VerificationStatus
from shared.repository import BaseRepository

from .models import CodePurpose, Identity, OneTimeCode

logger = logging.getLogger(__name__)

OTP_CODES_TABLE = "otp_codes"
VERIFICATION_TOKENS_TABLE = "verification_tokens"
AUDIT_LOGS_TABLE = "audit_logs"


class IdentityRepository(BaseRepository[Identity]):
    """Repository for the three role tables."""

    def get_by_id(self, user_type: UserType, user_id: str) -> Optional[Identity]:
        result = self._db.table(user_type.table).select("*").eq("id", user_id).limit(1).execute()
        row = self._first(result)
        return self._map_to_identity(row, user_type) if row else None

    def get_by_email(self, user_type: UserType, email: str) -> Optional[Identity]:
        result = self._db.table(user_type.table).select("*").eq("email", email).limit(1).execute()
        row = self._first(result)
        return self._map_to_identity(row, user_type) if row else None

    def email_exists(self, user_type: UserType, email: str) -> bool:
        result = self._db.table(user_type.table).select("id").eq("email", email).limit(1).execute()
        return bool(result.data)

    def phone_exists(self, user_type: UserType, phone: str) -> bool:
        result = self._db.table(user_type.table).select("id").eq("phone", phone).limit(1).execute()
        return bool(result.data)

    def create(self, user_type: UserType, data: dict[str, Any]) -> Identity:
        row = {
            "status": AccountStatus.VERIFYING.value,
            "verification_status": VerificationStatus.PENDING.value,
            **data,
        }
        result = self._db.table(user_type.table).insert(row).execute()
        return self._map_to_identity(result.data[0], user_type)

    def update(self, user_type: UserType, user_id: str, fields: dict[str, Any]) -> Optional[Identity]:
        result = self._db.table(user_type.table).update(fields).eq("id", user_id).execute()
        row = self._first(result)
        return self._map_to_identity(row, user_type) if row else None

    def update_password(self, user_type: UserType, user_id: str, password_hash: str) -> None:
        self._db.table(user_type.table).update({"password_hash": password_hash}).eq("id", user_id).execute()

    def mark_verified(
        self,
        user_type: UserType,
        *,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        if user_id is None and email is None:
            raise ValueError("mark_verified needs a user_id or an email")

        query = self._db.table(user_type.table).update({
            "verification_status": VerificationStatus.VERIFIED.value,
            "status": AccountStatus.ACTIVE.value,
        })
        query = query.eq("id", user_id) if user_id is not None else query.eq("email", email)
        query.execute()

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_identity(self, data: dict[str, Any], user_type: UserType) -> Identity:
        return Identity(
            id=str(data["id"]),
            user_type=user_type,
            name=data.get(user_type.name_field) or "",
            email=data.get("email") or None,
            phone=data.get("phone"),
            password_hash=data.get("password_hash") or "",
            status=data.get("status") or AccountStatus.VERIFYING,
            verification_status=data.get("verification_status") or VerificationStatus.PENDING,
        )


class OneTimeCodeRepository(BaseRepository[OneTimeCode]):
    """
    Repository for OTP codes or verification tokens.

    The same shape serves both tables; ``column`` names the secret column.
    """

    def __init__(self, db: Client, table: str = OTP_CODES_TABLE, column: str = "code") -> None:
        super().__init__(db)
        self._table = table
        self._column = column

    def invalidate_unused(self, identifier: str, purpose: CodePurpose) -> int:
        result = (
            self._db.table(self._table)
            .update({"used": True})
            .eq("identifier", identifier)
            .eq("purpose", purpose.value)
            .eq("used", False)
            .execute()
        )
        return self._count(result)

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
        row = {
            "identifier": identifier,
            self._column: code,
            "purpose": purpose.value,
            "user_type": user_type.value,
            "expires_at": expires_at.isoformat(),
            "used": False,
        }
        if user_id is not None:
            row["user_id"] = user_id
        result = self._db.table(self._table).insert(row).execute()
        return self._map_to_code(result.data[0])

    def find_unused(self, identifier: str, code: str, purpose: CodePurpose) -> Optional[OneTimeCode]:
        result = (
            self._db.table(self._table)
            .select("*")
            .eq("identifier", identifier)
            .eq(self._column, code)
            .eq("purpose", purpose.value)
            .eq("used", False)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return self._map_to_code(row) if row else None

    def find_unused_by_code(self, code: str, purpose: CodePurpose) -> Optional[OneTimeCode]:
        result = (
            self._db.table(self._table)
            .select("*")
            .eq(self._column, code)
            .eq("purpose", purpose.value)
            .eq("used", False)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return self._map_to_code(row) if row else None

    def mark_used(self, code_id: str) -> None:
        self._db.table(self._table).update({"used": True}).eq("id", code_id).execute()

    def _map_to_code(self, data: dict[str, Any]) -> OneTimeCode:
        return OneTimeCode(
            id=str(data["id"]),
            identifier=data.get("identifier") or "",
            code=data[self._column],
            purpose=CodePurpose(data["purpose"]),
            user_type=UserType(data["user_type"]),
            user_id=data.get("user_id"),
            expires_at=self._timestamp(data["expires_at"]),
            used=bool(data.get("used", False)),
            created_at=self._timestamp(data.get("created_at")),
        )


class AuditLogRepository(BaseRepository[dict]):
    """Writes audit rows; failures are logged and swallowed."""

    def record(
        self,
        action: str,
        *,
        user_id: Optional[str] = None,
        user_type: Optional[UserType] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        row = {
            "action": action,
            "entity_type": "auth",
            "user_id": user_id,
            "user_type": user_type.value if user_type else None,
            "details": details or {},
            "ip_address": ip_address or "unknown",
        }
        try:
            self._db.table(AUDIT_LOGS_TABLE).insert(row).execute()
        except Exception:
            logger.exception("Failed to write audit log entry for %s", action)
