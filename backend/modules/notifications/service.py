"""
Email delivery.

ResendEmailNotifier posts to the Resend REST API with httpx. Delivery
failures are logged and reported as False; they never raise.
"""

import logging
from typing import Optional

import httpx

from shared.config import Settings, get_settings

from .interfaces import INotifier
from .templates import render

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailNotifier:
    """Sends transactional email through Resend."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._from_email = from_email
        self._client = client
        self._timeout = timeout

    async def send_otp(self, to: str, code: str, name: Optional[str] = None) -> bool:
        subject, html, text = render("otp", code=code, greeting=f" {name}" if name else "")
        return await self._send(to, subject, html, text)

    async def send_password_reset(self, to: str, code: str) -> bool:
        subject, html, text = render("password_reset", code=code)
        return await self._send(to, subject, html, text)

    async def send_verification_link(self, to: str, url: str) -> bool:
        subject, html, text = render("verify_email", url=url)
        return await self._send(to, subject, html, text)

    async def send_welcome(self, to: str, name: str, user_type: str) -> bool:
        audience = "professional workers" if user_type == "worker" else "households"
        subject, html, text = render("welcome", name=name, audience=audience)
        return await self._send(to, subject, html, text)

    async def _send(self, to: str, subject: str, html: str, text: str) -> bool:
        if not self._api_key:
            logger.warning("RESEND_API_KEY not configured, email to recipient dropped")
            return False

        payload = {
            "from": self._from_email,
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            if self._client is not None:
                response = await self._client.post(RESEND_API_URL, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(RESEND_API_URL, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Email delivery failed (%s): %s", subject, e)
            return False

        logger.info("Email sent: %s", subject)
        return True


class LoggingNotifier:
    """Development notifier; logs that a message would have been sent."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    async def send_otp(self, to: str, code: str, name: Optional[str] = None) -> bool:
        return self._log("otp", to, code=code)

    async def send_password_reset(self, to: str, code: str) -> bool:
        return self._log("password_reset", to, code=code)

    async def send_verification_link(self, to: str, url: str) -> bool:
        return self._log("verify_email", to, url=url)

    async def send_welcome(self, to: str, name: str, user_type: str) -> bool:
        return self._log("welcome", to, name=name, user_type=user_type)

    def _log(self, kind: str, to: str, **values: str) -> bool:
        self.sent.append({"kind": kind, "to": to, **values})
        logger.info("Would send %s email", kind)
        return True


def get_notifier(settings: Optional[Settings] = None) -> INotifier:
    """Build the notifier selected by ``EMAIL_PROVIDER``."""
    settings = settings or get_settings()
    if settings.email_provider == "log":
        return LoggingNotifier()
    return ResendEmailNotifier(settings.resend_api_key, settings.company_email)
