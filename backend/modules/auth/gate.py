"""
Route gate for page requests.

A pure routing decision made from the path and the request cookies. It
only decodes tokens; it never reads the data layer.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from shared.models import UserType

from .tokens import TokenCodec

ADMIN_LOGIN_PATH = "/admin"
ADMIN_HOME_PATH = "/admin/dashboard"
ROLE_PREFIXES = {
    "/worker": UserType.WORKER,
    "/household": UserType.HOUSEHOLD,
}


@dataclass(frozen=True)
class GateDecision:
    action: str  # "pass" or "redirect"
    location: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.action == "redirect"


PASS = GateDecision("pass")


def _redirect(location: str) -> GateDecision:
    return GateDecision("redirect", location)


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


class RouteGate:
    """Decides pass-through or redirect for /admin, /worker and /household pages."""

    def __init__(
        self,
        codec: TokenCodec,
        session_cookie: str = "hh-token",
        admin_session_cookie: str = "hh-admin-token",
        admin_email: str = "",
        admin_email_domain: str = "",
    ):
        self._codec = codec
        self._session_cookie = session_cookie
        self._admin_session_cookie = admin_session_cookie
        self._admin_email = admin_email.lower()
        self._admin_email_domain = admin_email_domain.lower()

    def evaluate(self, path: str, cookies: Mapping[str, str]) -> GateDecision:
        normalized = path.rstrip("/") or "/"

        if _under(normalized, ADMIN_LOGIN_PATH):
            return self._evaluate_admin(normalized, cookies)

        for prefix, user_type in ROLE_PREFIXES.items():
            if _under(normalized, prefix):
                return self._evaluate_role(normalized, prefix, user_type, cookies)

        return PASS

    def is_allowed_admin_email(self, email: Optional[str]) -> bool:
        if not email:
            return False
        email = email.lower()
        if self._admin_email and email == self._admin_email:
            return True
        return bool(self._admin_email_domain) and email.endswith(self._admin_email_domain)

    def _evaluate_admin(self, path: str, cookies: Mapping[str, str]) -> GateDecision:
        claims = self._codec.verify(cookies.get(self._admin_session_cookie))
        allowed = (
            claims is not None
            and claims.user_type == UserType.ADMIN
            and self.is_allowed_admin_email(claims.email)
        )

        if path == ADMIN_LOGIN_PATH:
            return _redirect(ADMIN_HOME_PATH) if allowed else PASS

        return PASS if allowed else _redirect(ADMIN_LOGIN_PATH)

    def _evaluate_role(
        self,
        path: str,
        prefix: str,
        user_type: UserType,
        cookies: Mapping[str, str],
    ) -> GateDecision:
        if "/login" in path or "/register" in path:
            return PASS

        claims = self._codec.verify(cookies.get(self._session_cookie))
        if claims is None or claims.user_type != user_type:
            return _redirect(f"{prefix}/login")

        return PASS
