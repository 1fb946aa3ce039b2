"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum


class UserType(str, Enum):
    """Account role. Each role lives in its own table."""

    WORKER = "worker"
    HOUSEHOLD = "household"
    ADMIN = "admin"

    @property
    def table(self) -> str:
        return {
            UserType.WORKER: "workers",
            UserType.HOUSEHOLD: "households",
            UserType.ADMIN: "admins",
        }[self]

    @property
    def name_field(self) -> str:
        # Workers store their display name as full_name
        return "full_name" if self is UserType.WORKER else "name"


class AccountStatus(str, Enum):
    VERIFYING = "verifying"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
