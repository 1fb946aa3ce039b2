"""
One-time code issuance and verification.

Issuance order is invalidate-old -> insert-new; notification is left to
the caller and never rolls issuance back. The steps are sequential
writes, not a transaction: a crash between them can leave zero active
codes for an identifier, which a resend repairs.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from shared.models import UserType
from shared.store import KeyValueStore

from .codes import generate_code, generate_opaque_token
from .exceptions import ExpiredCodeError, InvalidCodeError, OTPLockedError
from .interfaces import IOneTimeCodeRepository
from .models import CodePurpose, IssuedCode, OneTimeCode

logger = logging.getLogger(__name__)

CODE_TTL: dict[CodePurpose, timedelta] = {
    CodePurpose.REGISTRATION: timedelta(minutes=10),
    CodePurpose.PHONE_VERIFICATION: timedelta(minutes=10),
    CodePurpose.EMAIL_VERIFICATION: timedelta(minutes=10),
    CodePurpose.PASSWORD_RESET: timedelta(minutes=15),
}
LINK_TOKEN_TTL = timedelta(hours=24)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OneTimeCodeIssuer:
    """
    Issues and checks numeric codes and opaque link tokens.

    Invariant: at most one unconsumed code per (identifier, purpose).
    """

    def __init__(
        self,
        codes: IOneTimeCodeRepository,
        link_tokens: IOneTimeCodeRepository,
        clock: Callable[[], datetime] = _utc_now,
        code_length: int = 6,
    ):
        self._codes = codes
        self._link_tokens = link_tokens
        self._clock = clock
        self._code_length = code_length

    def issue_code(
        self,
        identifier: str,
        purpose: CodePurpose,
        user_type: UserType,
        user_id: Optional[str] = None,
    ) -> IssuedCode:
        """Supersede any pending code and store a fresh one."""
        ttl = CODE_TTL[purpose]
        return self._issue(
            self._codes,
            identifier=identifier,
            secret=generate_code(self._code_length),
            purpose=purpose,
            user_type=user_type,
            user_id=user_id,
            ttl=ttl,
        )

    def issue_link_token(self, user_id: str, user_type: UserType) -> IssuedCode:
        """Issue an email-verification link token, keyed by user id."""
        return self._issue(
            self._link_tokens,
            identifier=user_id,
            secret=generate_opaque_token(),
            purpose=CodePurpose.EMAIL_VERIFICATION,
            user_type=user_type,
            user_id=user_id,
            ttl=LINK_TOKEN_TTL,
        )

    def verify_code(
        self,
        identifier: str,
        code: str,
        purpose: CodePurpose,
        consume: bool = True,
    ) -> OneTimeCode:
        """
        Check a numeric code.

        Raises:
            InvalidCodeError: No unused match (unknown, wrong or already used)
            ExpiredCodeError: Matching unused code past its expiry
        """
        record = self._codes.find_unused(identifier, code, purpose)
        return self._check(self._codes, record, consume)

    def verify_link_token(self, token: str, consume: bool = True) -> OneTimeCode:
        """Check an email-verification link token."""
        record = self._link_tokens.find_unused_by_code(token, CodePurpose.EMAIL_VERIFICATION)
        return self._check(self._link_tokens, record, consume)

    def consume(self, record: OneTimeCode, link: bool = False) -> None:
        repo = self._link_tokens if link else self._codes
        repo.mark_used(record.id)
        record.used = True

    # -------------------------------------------------------------------------

    def _issue(
        self,
        repo: IOneTimeCodeRepository,
        *,
        identifier: str,
        secret: str,
        purpose: CodePurpose,
        user_type: UserType,
        user_id: Optional[str],
        ttl: timedelta,
    ) -> IssuedCode:
        superseded = repo.invalidate_unused(identifier, purpose)
        if superseded:
            logger.debug("Superseded %d pending %s code(s)", superseded, purpose.value)

        expires_at = self._clock() + ttl
        repo.insert(
            identifier=identifier,
            code=secret,
            purpose=purpose,
            user_type=user_type,
            expires_at=expires_at,
            user_id=user_id,
        )
        return IssuedCode(
            code=secret,
            purpose=purpose,
            expires_at=expires_at,
            expires_in=int(ttl.total_seconds()),
        )

    def _check(
        self,
        repo: IOneTimeCodeRepository,
        record: Optional[OneTimeCode],
        consume: bool,
    ) -> OneTimeCode:
        if record is None:
            raise InvalidCodeError()
        if self._clock() > record.expires_at:
            raise ExpiredCodeError()
        if consume:
            repo.mark_used(record.id)
            record.used = True
        return record


class AttemptTracker:
    """
    Locks an identifier after repeated failed code verifications.

    Five failures lock it for fifteen minutes; a success clears the count.
    Counters that never reach the limit expire after the same window.
    """

    def __init__(
        self,
        store: KeyValueStore,
        max_attempts: int = 5,
        lockout_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._max_attempts = max_attempts
        self._lockout_seconds = lockout_seconds
        self._clock = clock

    def ensure_not_locked(self, identifier: str) -> None:
        key = self._key(identifier)
        record = self._store.get(key)
        if not record or record.get("locked_until") is None:
            return

        now = self._clock()
        if now < record["locked_until"]:
            remaining = max(1, int(record["locked_until"] - now + 0.999))
            raise OTPLockedError(retry_after=remaining)

        self._store.delete(key)

    def record_failure(self, identifier: str) -> None:
        key = self._key(identifier)
        record = self._store.get(key) or {"count": 0, "locked_until": None}
        record = {**record, "count": record["count"] + 1}
        if record["count"] >= self._max_attempts:
            record["locked_until"] = self._clock() + self._lockout_seconds
            logger.warning("Locked code verification after %d failed attempts", record["count"])
        self._store.set(key, record, ttl=self._lockout_seconds)

    def clear(self, identifier: str) -> None:
        self._store.delete(self._key(identifier))

    @staticmethod
    def _key(identifier: str) -> str:
        return f"otp-attempts:{identifier}"
