"""
Authentication service implementation.

Orchestrates login, registration, one-time-code flows and email
verification over the identity store, the code issuer and the notifier.
Password-reset and resend requests answer identically whether or not
the account exists.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, TypeVar

import pydantic

from shared.exceptions import ExternalServiceError, ValidationError, field_errors
from shared.models import UserType

from modules.notifications import INotifier

from .exceptions import (
    AccountSuspendedError,
    EmailAlreadyRegisteredError,
    ExpiredCodeError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidPhoneError,
    InvalidTokenError,
    PhoneAlreadyRegisteredError,
    WeakPasswordError,
)
from .interfaces import IAuditLog, IIdentityRepository
from .models import (
    AuthResult,
    CodePurpose,
    CodeSentResponse,
    HouseholdRegistration,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OneTimeCode,
    PasswordResetComplete,
    PasswordResetRequest,
    PasswordResetVerify,
    PublicUser,
    RegistrationResponse,
    ResendOTPRequest,
    SessionResponse,
    VerifiedResponse,
    VerifyOTPRequest,
    WorkerRegistration,
)
from .otp import CODE_TTL, AttemptTracker, OneTimeCodeIssuer
from .passwords import hash_password, verify_password
from .tokens import TokenCodec, TokenDenylist
from .validation import (
    check_password_strength,
    is_valid_email,
    is_valid_rwanda_phone,
    normalize_email,
    normalize_identifier,
    normalize_rwanda_phone,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

REGISTRATION_SCHEMAS: dict[UserType, type[pydantic.BaseModel]] = {
    UserType.WORKER: WorkerRegistration,
    UserType.HOUSEHOLD: HouseholdRegistration,
}

# Compared against when the account doesn't exist, so a miss costs a bcrypt check too
_dummy_hash: Optional[str] = None


def _timing_hash() -> str:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("not-a-real-password")
    return _dummy_hash


async def _blocking(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking store call or bcrypt operation off the event loop."""
    return await asyncio.to_thread(fn, *args, **kwargs)


class AuthService:
    """
    Implementation of the authentication flows.

    All collaborators are injected; see api.dependencies for wiring.
    Identity store, code store and audit calls are synchronous (the
    Supabase client blocks), so they run in worker threads along with
    bcrypt.
    """

    def __init__(
        self,
        identities: IIdentityRepository,
        issuer: OneTimeCodeIssuer,
        attempts: AttemptTracker,
        codec: TokenCodec,
        denylist: TokenDenylist,
        notifier: INotifier,
        audit: IAuditLog,
        bcrypt_rounds: int = 10,
        app_url: str = "http://localhost:3000",
    ):
        self._identities = identities
        self._issuer = issuer
        self._attempts = attempts
        self._codec = codec
        self._denylist = denylist
        self._notifier = notifier
        self._audit = audit
        self._bcrypt_rounds = bcrypt_rounds
        self._app_url = app_url.rstrip("/")

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    # -------------------------------------------------------------------------
    # Login / session
    # -------------------------------------------------------------------------

    async def login(self, request: LoginRequest, ip_address: Optional[str] = None) -> LoginResponse:
        """
        Check credentials and issue a session token.

        Raises:
            ValidationError: Malformed email
            InvalidCredentialsError: Unknown account or wrong password
            AccountSuspendedError: Correct password on a suspended account
        """
        if not is_valid_email(request.email.strip()):
            raise ValidationError(
                "Invalid email format",
                details={"fields": {"email": "Invalid email format"}},
            )
        email = normalize_email(request.email)

        identity = await _blocking(self._identities.get_by_email, request.user_type, email)
        if identity is None:
            await _blocking(verify_password, request.password, await _blocking(_timing_hash))
            logger.warning("Failed %s login: unknown account", request.user_type.value)
            raise InvalidCredentialsError()

        if not await _blocking(verify_password, request.password, identity.password_hash):
            logger.warning("Failed %s login for user %s", request.user_type.value, identity.id)
            raise InvalidCredentialsError()

        if identity.is_suspended:
            logger.warning("Suspended %s account %s attempted login", request.user_type.value, identity.id)
            raise AccountSuspendedError()

        token = self._codec.issue(identity)
        await _blocking(
            self._audit.record,
            "login",
            user_id=identity.id,
            user_type=identity.user_type,
            details={"email": email, "remember_me": request.remember_me},
            ip_address=ip_address,
        )
        return LoginResponse(user=PublicUser.from_identity(identity), token=token)

    async def get_session(self, auth: AuthResult) -> SessionResponse:
        """Re-read the identity behind a token; suspended or missing accounts fail."""
        if not auth.authenticated or auth.claims is None:
            raise InvalidTokenError()
        if self._denylist.is_revoked(auth.claims):
            raise InvalidTokenError()

        identity = await _blocking(
            self._identities.get_by_id, UserType(auth.claims.user_type), auth.claims.user_id
        )
        if identity is None or identity.is_suspended:
            raise InvalidTokenError()

        return SessionResponse(user=PublicUser.from_identity(identity))

    async def logout(self, auth: AuthResult, ip_address: Optional[str] = None) -> MessageResponse:
        if auth.claims is not None:
            self._denylist.revoke(auth.claims)
            await _blocking(
                self._audit.record,
                "logout",
                user_id=auth.user_id,
                user_type=auth.user_type,
                ip_address=ip_address,
            )
        return MessageResponse(message="Logged out successfully")

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    async def register(
        self,
        body: dict[str, Any],
        ip_address: Optional[str] = None,
    ) -> RegistrationResponse:
        """
        Register a worker or household.

        ``body`` carries ``user_type``, an optional ``send_otp`` flag and the
        role-specific fields.
        """
        fields = dict(body)
        raw_type = fields.pop("user_type", None)
        send_otp = bool(fields.pop("send_otp", True))

        if raw_type not in (UserType.WORKER.value, UserType.HOUSEHOLD.value):
            raise ValidationError(
                'Invalid user type. Must be "worker" or "household"',
                details={"fields": {"user_type": "Must be worker or household"}},
            )
        user_type = UserType(raw_type)

        try:
            data = REGISTRATION_SCHEMAS[user_type].model_validate(fields)
        except pydantic.ValidationError as e:
            raise ValidationError("Validation failed", details={"errors": field_errors(e.errors())})

        strength = check_password_strength(data.password)
        if not strength.is_valid:
            raise WeakPasswordError(strength.errors)

        if not is_valid_rwanda_phone(data.phone):
            raise InvalidPhoneError()
        phone = normalize_rwanda_phone(data.phone)
        email = normalize_email(str(data.email)) if data.email else None

        if email and await _blocking(self._identities.email_exists, user_type, email):
            raise EmailAlreadyRegisteredError()
        if await _blocking(self._identities.phone_exists, user_type, phone):
            raise PhoneAlreadyRegisteredError()

        profile = data.model_dump(exclude={"password", "email", "phone"}, exclude_none=True)
        password_hash = await _blocking(hash_password, data.password, self._bcrypt_rounds)
        identity = await _blocking(self._identities.create, user_type, {
            **profile,
            "email": email,
            "phone": phone,
            "password_hash": password_hash,
        })
        logger.info("Registered %s %s", user_type.value, identity.id)

        token = self._codec.issue(identity)

        otp_sent = False
        if send_otp and email:
            issued = await _blocking(
                self._issuer.issue_code,
                email,
                CodePurpose.REGISTRATION,
                user_type,
                user_id=identity.id,
            )
            otp_sent = await self._notifier.send_otp(email, issued.code, identity.name)
            if not otp_sent:
                logger.warning("Registration code for %s issued but not delivered", identity.id)

        if email:
            await self._notifier.send_welcome(email, identity.name, user_type.value)

        await _blocking(
            self._audit.record,
            "register",
            user_id=identity.id,
            user_type=user_type,
            ip_address=ip_address,
        )

        return RegistrationResponse(
            user=PublicUser.from_identity(identity),
            token=token,
            otp_sent=otp_sent,
            requires_verification=bool(email),
        )

    # -------------------------------------------------------------------------
    # One-time codes
    # -------------------------------------------------------------------------

    async def verify_otp(self, request: VerifyOTPRequest, ip_address: Optional[str] = None) -> VerifiedResponse:
        identifier = normalize_identifier(request.identifier)
        record = await self._verify_with_lockout(identifier, request.code, request.purpose)

        if request.purpose.activates_identity:
            # Sequential writes, not a transaction: the code is already consumed
            await _blocking(self._identities.mark_verified, record.user_type, email=identifier)

        await _blocking(
            self._audit.record,
            "otp_verified",
            user_id=record.user_id,
            user_type=record.user_type,
            details={"purpose": request.purpose.value},
            ip_address=ip_address,
        )
        return VerifiedResponse(message="OTP verified successfully")

    async def resend_otp(self, request: ResendOTPRequest) -> CodeSentResponse:
        """Issue a replacement code if the identifier belongs to an account."""
        identifier = normalize_identifier(request.identifier)
        expires_in = int(CODE_TTL[request.purpose].total_seconds())
        response = CodeSentResponse(
            message="If an account exists for this identifier, a new code has been sent.",
            expires_in=expires_in,
        )

        if not await self._account_exists(request.user_type, identifier):
            return response

        issued = await _blocking(self._issuer.issue_code, identifier, request.purpose, request.user_type)
        if is_valid_email(identifier):
            if not await self._notifier.send_otp(identifier, issued.code):
                logger.warning("Resent %s code issued but not delivered", request.purpose.value)
        else:
            logger.info("SMS delivery not configured; %s code stored only", request.purpose.value)
        return response

    # -------------------------------------------------------------------------
    # Password reset
    # -------------------------------------------------------------------------

    async def request_password_reset(
        self,
        request: PasswordResetRequest,
        ip_address: Optional[str] = None,
    ) -> CodeSentResponse:
        email = normalize_email(str(request.email))
        response = CodeSentResponse(
            message="If an account with that email exists, a password reset code has been sent.",
            expires_in=int(CODE_TTL[CodePurpose.PASSWORD_RESET].total_seconds()),
        )

        identity = await _blocking(self._identities.get_by_email, request.user_type, email)
        if identity is None:
            return response

        issued = await _blocking(
            self._issuer.issue_code,
            email,
            CodePurpose.PASSWORD_RESET,
            request.user_type,
            user_id=identity.id,
        )
        if not await self._notifier.send_password_reset(email, issued.code):
            logger.warning("Password reset code for %s issued but not delivered", identity.id)

        await _blocking(
            self._audit.record,
            "password_reset_requested",
            user_id=identity.id,
            user_type=request.user_type,
            ip_address=ip_address,
        )
        return response

    async def verify_reset_code(self, request: PasswordResetVerify) -> VerifiedResponse:
        """Check a reset code without consuming it."""
        await self._verify_with_lockout(
            normalize_email(str(request.email)), request.code, CodePurpose.PASSWORD_RESET, consume=False
        )
        return VerifiedResponse(message="Reset code verified successfully")

    async def reset_password(
        self,
        request: PasswordResetComplete,
        ip_address: Optional[str] = None,
    ) -> MessageResponse:
        strength = check_password_strength(request.new_password)
        if not strength.is_valid:
            raise WeakPasswordError(strength.errors)

        email = normalize_email(str(request.email))
        record = await self._verify_with_lockout(
            email, request.code, CodePurpose.PASSWORD_RESET, consume=False
        )

        identity = await _blocking(self._identities.get_by_email, request.user_type, email)
        if identity is None:
            raise InvalidCodeError()

        await _blocking(self._issuer.consume, record)
        password_hash = await _blocking(hash_password, request.new_password, self._bcrypt_rounds)
        await _blocking(self._identities.update_password, request.user_type, identity.id, password_hash)
        logger.info("Password reset completed for %s %s", request.user_type.value, identity.id)

        await _blocking(
            self._audit.record,
            "password_reset_completed",
            user_id=identity.id,
            user_type=request.user_type,
            ip_address=ip_address,
        )
        return MessageResponse(message="Password reset successfully")

    # -------------------------------------------------------------------------
    # Email verification links
    # -------------------------------------------------------------------------

    async def send_email_verification(self, auth: AuthResult) -> MessageResponse:
        if auth.claims is None:
            raise InvalidTokenError()

        identity = await _blocking(
            self._identities.get_by_id, UserType(auth.claims.user_type), auth.claims.user_id
        )
        if identity is None:
            raise InvalidTokenError()
        if not identity.email:
            raise ValidationError(
                "No email address on this account",
                details={"fields": {"email": "Email is required"}},
            )

        issued = await _blocking(self._issuer.issue_link_token, identity.id, identity.user_type)
        url = f"{self._app_url}/auth/email-verify?token={issued.code}"
        if not await self._notifier.send_verification_link(identity.email, url):
            raise ExternalServiceError("Failed to send verification email", service="email")

        return MessageResponse(message="Verification email sent successfully")

    async def verify_email(self, token: str, ip_address: Optional[str] = None) -> VerifiedResponse:
        record = await _blocking(self._issuer.verify_link_token, token)
        await _blocking(self._identities.mark_verified, record.user_type, user_id=record.user_id)

        await _blocking(
            self._audit.record,
            "email_verified",
            user_id=record.user_id,
            user_type=record.user_type,
            ip_address=ip_address,
        )
        return VerifiedResponse(message="Email verified successfully")

    # -------------------------------------------------------------------------

    async def _verify_with_lockout(
        self,
        identifier: str,
        code: str,
        purpose: CodePurpose,
        consume: bool = True,
    ) -> OneTimeCode:
        self._attempts.ensure_not_locked(identifier)
        try:
            record = await _blocking(self._issuer.verify_code, identifier, code, purpose, consume=consume)
        except (InvalidCodeError, ExpiredCodeError):
            self._attempts.record_failure(identifier)
            raise
        self._attempts.clear(identifier)
        return record

    async def _account_exists(self, user_type: UserType, identifier: str) -> bool:
        if is_valid_email(identifier):
            return await _blocking(self._identities.email_exists, user_type, identifier)
        if is_valid_rwanda_phone(identifier):
            return await _blocking(self._identities.phone_exists, user_type, identifier)
        return False
