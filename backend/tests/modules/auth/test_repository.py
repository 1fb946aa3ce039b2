from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from modules.auth.models import CodePurpose
from modules.auth.repository import (
    AuditLogRepository,
    IdentityRepository,
    OneTimeCodeRepository,
)
from shared.models import AccountStatus, UserType, VerificationStatus


@pytest.fixture
def db():
    return MagicMock()


class TestIdentityRepository:
    def test_get_by_email_maps_row(self, db):
        db.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = [{
            "id": "w1",
            "full_name": "John Worker",
            "email": "john@example.com",
            "phone": "+250788123456",
            "password_hash": "hash",
            "status": "active",
            "verification_status": "verified",
        }]

        identity = IdentityRepository(db).get_by_email(UserType.WORKER, "john@example.com")

        db.table.assert_called_with("workers")
        db.table.return_value.select.return_value.eq.assert_called_with("email", "john@example.com")
        assert identity.name == "John Worker"
        assert identity.status == AccountStatus.ACTIVE
        assert identity.verification_status == VerificationStatus.VERIFIED

    def test_get_by_id_missing(self, db):
        db.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = []
        assert IdentityRepository(db).get_by_id(UserType.HOUSEHOLD, "nope") is None
        db.table.assert_called_with("households")

    def test_create_defaults_status(self, db):
        db.table.return_value.insert.return_value.execute.return_value.data = [{
            "id": "h1",
            "name": "The Smiths",
            "email": "smith@example.com",
            "status": "verifying",
            "verification_status": "pending",
        }]

        identity = IdentityRepository(db).create(UserType.HOUSEHOLD, {"name": "The Smiths"})

        row = db.table.return_value.insert.call_args[0][0]
        assert row["status"] == "verifying"
        assert row["verification_status"] == "pending"
        assert identity.id == "h1"

    def test_mark_verified_by_email(self, db):
        IdentityRepository(db).mark_verified(UserType.HOUSEHOLD, email="h@example.com")

        db.table.return_value.update.assert_called_once_with({
            "verification_status": "verified",
            "status": "active",
        })
        db.table.return_value.update.return_value.eq.assert_called_once_with("email", "h@example.com")

    def test_mark_verified_needs_key(self, db):
        with pytest.raises(ValueError):
            IdentityRepository(db).mark_verified(UserType.HOUSEHOLD)


class TestOneTimeCodeRepository:
    def test_insert_uses_secret_column(self, db):
        db.table.return_value.insert.return_value.execute.return_value.data = [{
            "id": "t1",
            "identifier": "w1",
            "token": "abc",
            "purpose": "email_verification",
            "user_type": "worker",
            "user_id": "w1",
            "expires_at": "2030-01-01T00:00:00Z",
            "used": False,
        }]
        repo = OneTimeCodeRepository(db, table="verification_tokens", column="token")

        record = repo.insert(
            identifier="w1",
            code="abc",
            purpose=CodePurpose.EMAIL_VERIFICATION,
            user_type=UserType.WORKER,
            expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
            user_id="w1",
        )

        db.table.assert_called_with("verification_tokens")
        row = db.table.return_value.insert.call_args[0][0]
        assert row["token"] == "abc"
        assert row["used"] is False
        assert record.code == "abc"
        assert record.expires_at == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_invalidate_unused_counts_rows(self, db):
        chain = db.table.return_value.update.return_value.eq.return_value.eq.return_value.eq.return_value
        chain.execute.return_value.data = [{"id": "1"}, {"id": "2"}]

        assert OneTimeCodeRepository(db).invalidate_unused("a@example.com", CodePurpose.REGISTRATION) == 2
        db.table.return_value.update.assert_called_once_with({"used": True})

    def test_mark_used(self, db):
        OneTimeCodeRepository(db).mark_used("c1")
        db.table.assert_called_with("otp_codes")
        db.table.return_value.update.return_value.eq.assert_called_once_with("id", "c1")


class TestAuditLogRepository:
    def test_record(self, db):
        AuditLogRepository(db).record("login", user_id="u1", user_type=UserType.WORKER)

        db.table.assert_called_with("audit_logs")
        row = db.table.return_value.insert.call_args[0][0]
        assert row["action"] == "login"
        assert row["user_type"] == "worker"
        assert row["ip_address"] == "unknown"

    def test_failure_is_swallowed(self, db):
        """Audit writes are best effort."""
        db.table.return_value.insert.return_value.execute.side_effect = RuntimeError("db down")
        AuditLogRepository(db).record("login")
