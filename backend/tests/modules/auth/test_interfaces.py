from unittest.mock import MagicMock

from modules.auth.interfaces import IAuditLog, IIdentityRepository, IOneTimeCodeRepository
from modules.auth.memory import (
    InMemoryAuditLog,
    InMemoryIdentityRepository,
    InMemoryOneTimeCodeRepository,
)
from modules.auth.repository import AuditLogRepository, IdentityRepository, OneTimeCodeRepository


class TestAuthInterfaces:
    def test_memory_repositories_implement_interfaces(self):
        """In-memory stand-ins should satisfy the same protocols."""
        assert isinstance(InMemoryIdentityRepository(), IIdentityRepository)
        assert isinstance(InMemoryOneTimeCodeRepository(), IOneTimeCodeRepository)
        assert isinstance(InMemoryAuditLog(), IAuditLog)

    def test_supabase_repositories_implement_interfaces(self):
        db = MagicMock()
        assert isinstance(IdentityRepository(db), IIdentityRepository)
        assert isinstance(OneTimeCodeRepository(db), IOneTimeCodeRepository)
        assert isinstance(AuditLogRepository(db), IAuditLog)

    def test_interface_methods_exist(self):
        methods = [
            "get_by_id",
            "get_by_email",
            "email_exists",
            "phone_exists",
            "create",
            "update",
            "update_password",
            "mark_verified",
        ]
        for method in methods:
            assert hasattr(IIdentityRepository, method)
