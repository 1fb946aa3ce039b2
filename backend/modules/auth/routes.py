"""
Auth API endpoints.

Login, registration, one-time-code, password reset and email verification
flows. Handlers stay thin: they resolve the caller and client address,
then delegate to AuthService.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response

from api.dependencies import get_auth_service, get_csrf_protector
from api.middleware.auth import (
    get_current_user,
    get_sensitive_user,
    rate_limit,
    request_ip,
    session_key,
)
from shared.config import get_settings
from shared.models import UserType

from .csrf import CSRF_COOKIE, CSRFProtector
from .models import (
    AuthResult,
    CodeSentResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetComplete,
    PasswordResetRequest,
    PasswordResetVerify,
    RegistrationResponse,
    ResendOTPRequest,
    SessionResponse,
    VerifiedResponse,
    VerifyEmailRequest,
    VerifyOTPRequest,
)
from .service import AuthService

router = APIRouter()

_settings = get_settings()


def _session_cookie_names(user_type: UserType) -> list[str]:
    """Admins also get the cookie the /admin pages are gated on."""
    settings = get_settings()
    if user_type == UserType.ADMIN:
        return [settings.session_cookie_name, settings.admin_session_cookie_name]
    return [settings.session_cookie_name]


def _set_session_cookie(response: Response, key: str, token: str, max_age: int) -> None:
    settings = get_settings()
    response.set_cookie(
        key=key,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path="/",
    )


# -----------------------------------------------------------------------------
# Login / session
# -----------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limit("login", _settings.login_rate_limit_requests))],
)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Exchange credentials for a session token.

    The token is returned in the body and also set as an httponly cookie;
    admins get the admin session cookie as well.
    """
    result = await service.login(body, request_ip(request))
    for name in _session_cookie_names(result.user.user_type):
        _set_session_cookie(response, name, result.token, service.codec.expires_in)
    return result


@router.get("/verify", response_model=SessionResponse)
async def verify_session(
    auth: AuthResult = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Confirm the caller's token and return the current account."""
    return await service.get_session(auth)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    auth: AuthResult = Depends(get_sensitive_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    result = await service.logout(auth, request_ip(request))
    for name in _session_cookie_names(auth.user_type):
        response.delete_cookie(name, path="/")
    return result


@router.get("/csrf")
async def issue_csrf_token(
    response: Response,
    auth: AuthResult = Depends(get_current_user),
    csrf: CSRFProtector = Depends(get_csrf_protector),
) -> dict:
    """Issue a CSRF token bound to the caller's session."""
    token = csrf.generate(session_key(auth))
    response.set_cookie(
        key=CSRF_COOKIE,
        value=token,
        max_age=get_settings().csrf_token_max_age,
        httponly=False,
        samesite="strict",
        path="/",
    )
    return {"success": True, "csrf_token": token}


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------


@router.post("/register", response_model=RegistrationResponse, status_code=201)
async def register(
    request: Request,
    body: dict[str, Any] = Body(...),
    service: AuthService = Depends(get_auth_service),
) -> RegistrationResponse:
    """
    Register a worker or household.

    The payload's ``user_type`` selects which fields are required.
    """
    return await service.register(body, request_ip(request))


# -----------------------------------------------------------------------------
# One-time codes
# -----------------------------------------------------------------------------


@router.post(
    "/verify-otp",
    response_model=VerifiedResponse,
    dependencies=[Depends(rate_limit("otp", _settings.otp_rate_limit_requests))],
)
async def verify_otp(
    body: VerifyOTPRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> VerifiedResponse:
    return await service.verify_otp(body, request_ip(request))


@router.put(
    "/verify-otp",
    response_model=CodeSentResponse,
    dependencies=[Depends(rate_limit("otp-resend", _settings.otp_rate_limit_requests))],
)
async def resend_otp(
    body: ResendOTPRequest,
    service: AuthService = Depends(get_auth_service),
) -> CodeSentResponse:
    """Send a fresh code. The response does not reveal whether the account exists."""
    return await service.resend_otp(body)


# -----------------------------------------------------------------------------
# Password reset
# -----------------------------------------------------------------------------


@router.post(
    "/forgot-password",
    response_model=CodeSentResponse,
    dependencies=[Depends(rate_limit("forgot-password", _settings.otp_rate_limit_requests))],
)
async def forgot_password(
    body: PasswordResetRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> CodeSentResponse:
    return await service.request_password_reset(body, request_ip(request))


@router.put(
    "/forgot-password",
    response_model=VerifiedResponse,
    dependencies=[Depends(rate_limit("otp", _settings.otp_rate_limit_requests))],
)
async def verify_reset_code(
    body: PasswordResetVerify,
    service: AuthService = Depends(get_auth_service),
) -> VerifiedResponse:
    """Check a reset code; it stays valid for the final step."""
    return await service.verify_reset_code(body)


@router.patch(
    "/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("otp", _settings.otp_rate_limit_requests))],
)
async def reset_password(
    body: PasswordResetComplete,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.reset_password(body, request_ip(request))


# -----------------------------------------------------------------------------
# Email verification
# -----------------------------------------------------------------------------


@router.put("/verify-email", response_model=MessageResponse)
async def send_verification_email(
    auth: AuthResult = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.send_email_verification(auth)


@router.post("/verify-email", response_model=VerifiedResponse)
async def verify_email(
    body: VerifyEmailRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> VerifiedResponse:
    return await service.verify_email(body.token, request_ip(request))
