"""
In-memory repositories.

Same interfaces as the Supabase repositories. Used by the test suite and
for running the API locally without a database.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from shared.models import AccountStatus, UserType, VerificationStatus

from .models import CodePurpose, Identity, OneTimeCode


class InMemoryIdentityRepository:
    """Identity store keyed by (user_type, id)."""

    def __init__(self) -> None:
        self._rows: dict[UserType, dict[str, Identity]] = {t: {} for t in UserType}

    def get_by_id(self, user_type: UserType, user_id: str) -> Optional[Identity]:
        return self._rows[user_type].get(user_id)

    def get_by_email(self, user_type: UserType, email: str) -> Optional[Identity]:
        for identity in self._rows[user_type].values():
            if identity.email == email:
                return identity
        return None

    def email_exists(self, user_type: UserType, email: str) -> bool:
        return self.get_by_email(user_type, email) is not None

    def phone_exists(self, user_type: UserType, phone: str) -> bool:
        return any(i.phone == phone for i in self._rows[user_type].values())

    def create(self, user_type: UserType, data: dict[str, Any]) -> Identity:
        identity = Identity(
            id=str(data.get("id") or uuid.uuid4()),
            user_type=user_type,
            name=data.get(user_type.name_field) or data.get("name") or "",
            email=data.get("email") or None,
            phone=data.get("phone"),
            password_hash=data.get("password_hash", ""),
            status=data.get("status", AccountStatus.VERIFYING),
            verification_status=data.get("verification_status", VerificationStatus.PENDING),
        )
        self._rows[user_type][identity.id] = identity
        return identity

    def update(self, user_type: UserType, user_id: str, fields: dict[str, Any]) -> Optional[Identity]:
        identity = self._rows[user_type].get(user_id)
        if identity is None:
            return None
        changes = dict(fields)
        if user_type.name_field in changes:
            changes["name"] = changes.pop(user_type.name_field)
        allowed = {k: v for k, v in changes.items() if k in Identity.model_fields and k != "id"}
        updated = identity.model_copy(update=allowed)
        self._rows[user_type][user_id] = updated
        return updated

    def update_password(self, user_type: UserType, user_id: str, password_hash: str) -> None:
        self.update(user_type, user_id, {"password_hash": password_hash})

    def mark_verified(
        self,
        user_type: UserType,
        *,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        if user_id is None and email is None:
            raise ValueError("mark_verified needs a user_id or an email")
        for identity in list(self._rows[user_type].values()):
            if (user_id is not None and identity.id == user_id) or (
                user_id is None and identity.email == email
            ):
                self.update(user_type, identity.id, {
                    "verification_status": VerificationStatus.VERIFIED,
                    "status": AccountStatus.ACTIVE,
                })


class InMemoryOneTimeCodeRepository:
    """Code store; rows are flagged used, never deleted."""

    def __init__(self) -> None:
        self._rows: dict[str, OneTimeCode] = {}

    @property
    def rows(self) -> list[OneTimeCode]:
        return list(self._rows.values())

    def invalidate_unused(self, identifier: str, purpose: CodePurpose) -> int:
        count = 0
        for row in self._rows.values():
            if row.identifier == identifier and row.purpose == purpose and not row.used:
                row.used = True
                count += 1
        return count

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
        row = OneTimeCode(
            id=str(uuid.uuid4()),
            identifier=identifier,
            code=code,
            purpose=purpose,
            user_type=user_type,
            user_id=user_id,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        self._rows[row.id] = row
        return row

    def find_unused(self, identifier: str, code: str, purpose: CodePurpose) -> Optional[OneTimeCode]:
        for row in self._rows.values():
            if (
                row.identifier == identifier
                and row.code == code
                and row.purpose == purpose
                and not row.used
            ):
                return row
        return None

    def find_unused_by_code(self, code: str, purpose: CodePurpose) -> Optional[OneTimeCode]:
        for row in self._rows.values():
            if row.code == code and row.purpose == purpose and not row.used:
                return row
        return None

    def mark_used(self, code_id: str) -> None:
        row = self._rows.get(code_id)
        if row is not None:
            row.used = True


class InMemoryAuditLog:
    """Keeps audit entries in a list."""

    def __init__(self) -> None:
        self.entries: list[dict[str, Any]] = []

    def record(
        self,
        action: str,
        *,
        user_id: Optional[str] = None,
        user_type: Optional[UserType] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        self.entries.append({
            "action": action,
            "user_id": user_id,
            "user_type": user_type,
            "details": details or {},
            "ip_address": ip_address,
        })
