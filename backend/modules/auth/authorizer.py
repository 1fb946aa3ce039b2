"""Ownership-based access decisions. Admins bypass ownership."""

import logging
from typing import Optional

from shared.models import UserType

from .exceptions import AccessDeniedError, InsufficientPermissionsError
from .models import AuthResult

logger = logging.getLogger(__name__)


def authorize(auth: AuthResult, resource_owner_id: Optional[str]) -> bool:
    """Return True if the authenticated caller may access the owner's resource."""
    if not auth.authenticated or not auth.user_id:
        return False

    if auth.user_type == UserType.ADMIN:
        return True

    return auth.user_id == resource_owner_id


def require_access(auth: AuthResult, resource_owner_id: Optional[str]) -> None:
    if not authorize(auth, resource_owner_id):
        raise AccessDeniedError()


def require_user_type(auth: AuthResult, *allowed: UserType) -> None:
    """Raise unless the caller has one of the allowed roles."""
    if not auth.authenticated or auth.user_type not in allowed:
        required_role = "|".join(t.value for t in allowed)
        user_role = auth.user_type.value if auth.user_type else None
        logger.warning(
            "Role check failed for user %s: requires %s, has %s",
            auth.user_id, required_role, user_role,
        )
        raise InsufficientPermissionsError(required_role=required_role, user_role=user_role)
