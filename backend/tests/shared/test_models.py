"""
Tests for shared models.
"""

import pytest

from shared.models import AccountStatus, UserType, VerificationStatus


class TestUserType:
    @pytest.mark.parametrize(
        "user_type,table",
        [
            (UserType.WORKER, "workers"),
            (UserType.HOUSEHOLD, "households"),
            (UserType.ADMIN, "admins"),
        ],
    )
    def test_table(self, user_type, table):
        """Each role lives in its own table."""
        assert user_type.table == table

    def test_name_field(self):
        """Workers store their display name as full_name."""
        assert UserType.WORKER.name_field == "full_name"
        assert UserType.HOUSEHOLD.name_field == "name"
        assert UserType.ADMIN.name_field == "name"

    def test_string_values(self):
        assert UserType("worker") is UserType.WORKER
        with pytest.raises(ValueError):
            UserType("superuser")


class TestStatuses:
    def test_account_status_values(self):
        assert {s.value for s in AccountStatus} == {"verifying", "active", "suspended", "inactive"}

    def test_verification_status_values(self):
        assert {s.value for s in VerificationStatus} == {"pending", "verified", "rejected"}
