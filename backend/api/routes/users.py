"""
User endpoints.

Provides endpoints for the current user's session information.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.auth.models import AuthResult
from shared.models import UserType

from ..middleware.auth import get_current_user

router = APIRouter()


class CurrentUserResponse(BaseModel):
    """Claims carried by the caller's token."""

    id: str
    email: Optional[str] = None
    user_type: UserType
    token_id: Optional[str] = None


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(auth: AuthResult = Depends(get_current_user)) -> CurrentUserResponse:
    """
    Get the current authenticated user.

    Returns what the token says; use /api/auth/verify to re-read the account.
    """
    return CurrentUserResponse(
        id=auth.user_id,
        email=auth.email,
        user_type=auth.user_type,
        token_id=auth.claims.token_id if auth.claims else None,
    )
