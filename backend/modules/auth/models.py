"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from shared.models import AccountStatus, UserType, VerificationStatus


# -----------------------------------------------------------------------------
# Identities
# -----------------------------------------------------------------------------


class Identity(BaseModel):
    """
    A worker, household or admin account.

    One row per role table; ``user_type`` says which table holds it.
    """

    id: str
    user_type: UserType
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    password_hash: str = ""
    status: AccountStatus = AccountStatus.VERIFYING
    verification_status: VerificationStatus = VerificationStatus.PENDING

    @property
    def is_suspended(self) -> bool:
        return self.status == AccountStatus.SUSPENDED


class PublicUser(BaseModel):
    """User data returned to clients (no sensitive fields)."""

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    name: str
    user_type: UserType

    @classmethod
    def from_identity(cls, identity: Identity) -> "PublicUser":
        return cls(
            id=identity.id,
            email=identity.email,
            phone=identity.phone,
            name=identity.name,
            user_type=identity.user_type,
        )


# -----------------------------------------------------------------------------
# Session claims
# -----------------------------------------------------------------------------


class _ClaimsBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime
    token_id: Optional[str] = None


class WorkerClaims(_ClaimsBase):
    user_type: Literal["worker"] = "worker"


class HouseholdClaims(_ClaimsBase):
    user_type: Literal["household"] = "household"


class AdminClaims(_ClaimsBase):
    user_type: Literal["admin"] = "admin"


SessionClaims = Annotated[
    Union[WorkerClaims, HouseholdClaims, AdminClaims],
    Field(discriminator="user_type"),
]


class AuthResult(BaseModel):
    """Outcome of authenticating a single request."""

    model_config = ConfigDict(frozen=True)

    authenticated: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    user_type: Optional[UserType] = None
    claims: Optional[SessionClaims] = None
    token: Optional[str] = None
    error: Optional[str] = None


# -----------------------------------------------------------------------------
# One-time codes
# -----------------------------------------------------------------------------


class CodePurpose(str, Enum):
    REGISTRATION = "registration"
    PASSWORD_RESET = "password_reset"
    PHONE_VERIFICATION = "phone_verification"
    EMAIL_VERIFICATION = "email_verification"

    @property
    def activates_identity(self) -> bool:
        return self in (CodePurpose.REGISTRATION, CodePurpose.EMAIL_VERIFICATION)


class OneTimeCode(BaseModel):
    """A numeric OTP or an opaque verification token."""

    id: str
    identifier: str
    code: str
    purpose: CodePurpose
    user_type: UserType
    user_id: Optional[str] = None
    expires_at: datetime
    used: bool = False
    created_at: Optional[datetime] = None


class IssuedCode(BaseModel):
    """Result of issuing a code; the secret goes to the notifier only."""

    code: str
    purpose: CodePurpose
    expires_at: datetime
    expires_in: int = Field(..., description="Seconds until expiry")


# -----------------------------------------------------------------------------
# Request bodies
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    user_type: UserType
    remember_me: bool = False


class WorkerRegistration(BaseModel):
    full_name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=9)
    password: str = Field(..., min_length=8)
    email: Optional[EmailStr] = None
    national_id: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[Literal["Male", "Female", "Other"]] = None
    district: Optional[str] = None
    sector: Optional[str] = None
    address: Optional[str] = None


class HouseholdRegistration(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=9)
    password: str = Field(..., min_length=8)
    alternative_contact: Optional[str] = None
    district: Optional[str] = None
    sector: Optional[str] = None
    address: Optional[str] = None


class VerifyOTPRequest(BaseModel):
    identifier: str = Field(..., min_length=1)
    code: str = Field(..., min_length=6, max_length=6)
    purpose: CodePurpose


class ResendOTPRequest(BaseModel):
    identifier: str = Field(..., min_length=1)
    purpose: CodePurpose
    user_type: UserType


class PasswordResetRequest(BaseModel):
    email: EmailStr
    user_type: UserType


class PasswordResetVerify(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)
    user_type: UserType


class PasswordResetComplete(PasswordResetVerify):
    new_password: str = Field(..., min_length=8)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    user: PublicUser
    token: str


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str = "Registration successful"
    user: PublicUser
    token: str
    otp_sent: bool
    requires_verification: bool


class CodeSentResponse(BaseModel):
    success: bool = True
    message: str
    expires_in: int


class VerifiedResponse(BaseModel):
    success: bool = True
    message: str
    verified: bool = True


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class SessionResponse(BaseModel):
    success: bool = True
    authenticated: bool = True
    user: PublicUser
