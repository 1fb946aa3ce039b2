import pytest
from datetime import datetime, timedelta, timezone

from modules.auth.exceptions import ExpiredCodeError, InvalidCodeError, OTPLockedError
from modules.auth.memory import InMemoryOneTimeCodeRepository
from modules.auth.models import CodePurpose
from modules.auth.otp import AttemptTracker, OneTimeCodeIssuer
from shared.models import UserType
from shared.store import InMemoryStore

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
EMAIL = "jane@example.com"


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(START)


@pytest.fixture
def codes():
    return InMemoryOneTimeCodeRepository()


@pytest.fixture
def links():
    return InMemoryOneTimeCodeRepository()


@pytest.fixture
def issuer(codes, links, clock):
    return OneTimeCodeIssuer(codes, links, clock=clock)


class TestIssueCode:
    def test_issues_six_digit_code(self, issuer, codes):
        issued = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD, user_id="h1")

        assert len(issued.code) == 6 and issued.code.isdigit()
        assert issued.expires_in == 600
        assert issued.expires_at == START + timedelta(minutes=10)
        assert len(codes.rows) == 1
        assert codes.rows[0].user_id == "h1"

    def test_password_reset_ttl(self, issuer):
        issued = issuer.issue_code(EMAIL, CodePurpose.PASSWORD_RESET, UserType.HOUSEHOLD)
        assert issued.expires_in == 900

    def test_supersedes_pending_code(self, issuer, codes):
        """At most one unconsumed code per identifier and purpose."""
        first = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)
        second = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)

        unused = [r for r in codes.rows if not r.used]
        assert len(unused) == 1
        assert unused[0].code == second.code

        if first.code != second.code:
            with pytest.raises(InvalidCodeError):
                issuer.verify_code(EMAIL, first.code, CodePurpose.REGISTRATION)

    def test_other_purposes_untouched(self, issuer, codes):
        issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)
        issuer.issue_code(EMAIL, CodePurpose.PASSWORD_RESET, UserType.HOUSEHOLD)
        assert len([r for r in codes.rows if not r.used]) == 2


class TestVerifyCode:
    def test_verify_consumes(self, issuer):
        issued = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)

        record = issuer.verify_code(EMAIL, issued.code, CodePurpose.REGISTRATION)
        assert record.used is True

        with pytest.raises(InvalidCodeError):
            issuer.verify_code(EMAIL, issued.code, CodePurpose.REGISTRATION)

    def test_verify_without_consuming(self, issuer):
        issued = issuer.issue_code(EMAIL, CodePurpose.PASSWORD_RESET, UserType.HOUSEHOLD)

        issuer.verify_code(EMAIL, issued.code, CodePurpose.PASSWORD_RESET, consume=False)
        record = issuer.verify_code(EMAIL, issued.code, CodePurpose.PASSWORD_RESET)
        assert record.used is True

    def test_wrong_code(self, issuer):
        issued = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)
        wrong = "000000" if issued.code != "000000" else "111111"
        with pytest.raises(InvalidCodeError):
            issuer.verify_code(EMAIL, wrong, CodePurpose.REGISTRATION)

    def test_wrong_purpose(self, issuer):
        issued = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)
        with pytest.raises(InvalidCodeError):
            issuer.verify_code(EMAIL, issued.code, CodePurpose.PASSWORD_RESET)

    def test_expired_is_distinct(self, issuer, clock):
        """A matching code past its expiry reports expiry, not invalidity."""
        issued = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)
        clock.now = START + timedelta(minutes=10, seconds=1)

        with pytest.raises(ExpiredCodeError):
            issuer.verify_code(EMAIL, issued.code, CodePurpose.REGISTRATION)

    def test_valid_at_expiry_instant(self, issuer, clock):
        issued = issuer.issue_code(EMAIL, CodePurpose.REGISTRATION, UserType.HOUSEHOLD)
        clock.now = issued.expires_at
        issuer.verify_code(EMAIL, issued.code, CodePurpose.REGISTRATION)


class TestLinkTokens:
    def test_issue_and_verify(self, issuer, links):
        issued = issuer.issue_link_token("w1", UserType.WORKER)

        assert len(issued.code) == 64
        assert issued.expires_in == 24 * 3600
        assert links.rows[0].identifier == "w1"

        record = issuer.verify_link_token(issued.code)
        assert record.user_id == "w1"
        assert record.user_type == UserType.WORKER

        with pytest.raises(InvalidCodeError):
            issuer.verify_link_token(issued.code)

    def test_expired_link(self, issuer, clock):
        issued = issuer.issue_link_token("w1", UserType.WORKER)
        clock.now = START + timedelta(hours=25)
        with pytest.raises(ExpiredCodeError):
            issuer.verify_link_token(issued.code)

    def test_reissue_supersedes(self, issuer):
        first = issuer.issue_link_token("w1", UserType.WORKER)
        issuer.issue_link_token("w1", UserType.WORKER)
        with pytest.raises(InvalidCodeError):
            issuer.verify_link_token(first.code)


class TestAttemptTracker:
    @pytest.fixture
    def now(self):
        return [1000.0]

    @pytest.fixture
    def tracker(self, now):
        return AttemptTracker(InMemoryStore(), clock=lambda: now[0])

    def test_locks_after_five_failures(self, tracker):
        for _ in range(4):
            tracker.record_failure(EMAIL)
        tracker.ensure_not_locked(EMAIL)

        tracker.record_failure(EMAIL)
        with pytest.raises(OTPLockedError) as exc_info:
            tracker.ensure_not_locked(EMAIL)
        assert exc_info.value.retry_after == 900
        assert exc_info.value.status_code == 429

    def test_lock_expires(self, tracker, now):
        for _ in range(5):
            tracker.record_failure(EMAIL)
        now[0] += 901
        tracker.ensure_not_locked(EMAIL)

    def test_clear_resets_count(self, tracker):
        for _ in range(4):
            tracker.record_failure(EMAIL)
        tracker.clear(EMAIL)
        tracker.record_failure(EMAIL)
        tracker.ensure_not_locked(EMAIL)

    def test_identifiers_independent(self, tracker):
        for _ in range(5):
            tracker.record_failure(EMAIL)
        tracker.ensure_not_locked("other@example.com")

    def test_counter_expires_without_lockout(self, now):
        """Failures below the limit are forgotten after the lockout window."""
        store = InMemoryStore(clock=lambda: now[0])
        tracker = AttemptTracker(store, clock=lambda: now[0])
        for _ in range(4):
            tracker.record_failure(EMAIL)

        now[0] += 901
        assert len(list(store.keys())) == 0

        tracker.record_failure(EMAIL)
        tracker.ensure_not_locked(EMAIL)
