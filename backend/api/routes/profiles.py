"""
Worker and household profile endpoints.

Callers may read or edit only their own profile; admins may act on any.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from modules.auth.authorizer import require_access
from modules.auth.interfaces import IIdentityRepository
from modules.auth.models import AuthResult, PublicUser
from shared.exceptions import NotFoundError, ValidationError
from shared.models import UserType

from ..dependencies import get_identity_repository
from ..middleware.auth import get_current_user, require_csrf

logger = logging.getLogger(__name__)

router = APIRouter()

PROFILE_ROLES = {"worker": UserType.WORKER, "household": UserType.HOUSEHOLD}


class ProfileUpdate(BaseModel):
    """Editable profile fields; identity columns are not writable here."""

    name: Optional[str] = Field(default=None, min_length=2)
    district: Optional[str] = None
    sector: Optional[str] = None
    address: Optional[str] = None


class ProfileResponse(BaseModel):
    success: bool = True
    user: PublicUser


def _role(role: str) -> UserType:
    user_type = PROFILE_ROLES.get(role)
    if user_type is None:
        raise NotFoundError(f"Unknown profile type: {role}")
    return user_type


@router.get("/{role}/profile/{user_id}", response_model=ProfileResponse)
async def get_profile(
    role: str,
    user_id: str,
    auth: AuthResult = Depends(get_current_user),
    identities: IIdentityRepository = Depends(get_identity_repository),
) -> ProfileResponse:
    user_type = _role(role)
    require_access(auth, user_id)

    identity = identities.get_by_id(user_type, user_id)
    if identity is None:
        raise NotFoundError("Profile not found")
    return ProfileResponse(user=PublicUser.from_identity(identity))


@router.patch("/{role}/profile/{user_id}", response_model=ProfileResponse)
async def update_profile(
    role: str,
    user_id: str,
    body: ProfileUpdate,
    auth: AuthResult = Depends(require_csrf),
    identities: IIdentityRepository = Depends(get_identity_repository),
) -> ProfileResponse:
    """
    Update the caller's profile.

    Requires the session's CSRF token in the x-csrf-token header.
    """
    user_type = _role(role)
    require_access(auth, user_id)

    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise ValidationError("No fields to update")
    if "name" in fields:
        fields[user_type.name_field] = fields.pop("name")

    identity = identities.update(user_type, user_id, fields)
    if identity is None:
        raise NotFoundError("Profile not found")

    logger.info("Profile %s updated by %s", user_id, auth.user_id)
    return ProfileResponse(user=PublicUser.from_identity(identity))
