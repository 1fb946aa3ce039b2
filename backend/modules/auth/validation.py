"""
Input checks shared by registration and login.

Phone rules follow the Rwandan numbering plan: +250 followed by nine
digits, with local 07XXXXXXXX and 7XXXXXXXX forms accepted.
"""

import re
from dataclasses import dataclass, field

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_SEPARATORS_RE = re.compile(r"[\s\-()]")
SPECIAL_CHARS_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")
COUNTRY_CODE = "+250"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def normalize_email(email: str) -> str:
    """Canonical form used for storage, lookups and code identifiers."""
    return (email or "").strip().lower()


def normalize_identifier(identifier: str) -> str:
    """Normalise an email or Rwandan phone number used as a code identifier."""
    if is_valid_email(identifier.strip()):
        return normalize_email(identifier)
    if is_valid_rwanda_phone(identifier):
        return normalize_rwanda_phone(identifier)
    return identifier


def _clean_phone(phone: str) -> str:
    return PHONE_SEPARATORS_RE.sub("", phone or "")


def is_valid_rwanda_phone(phone: str) -> bool:
    cleaned = _clean_phone(phone)
    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    if not digits.isdigit():
        return False

    if cleaned.startswith("+250"):
        return len(cleaned) == 13
    if cleaned.startswith("250"):
        return len(cleaned) == 12
    if cleaned.startswith("07"):
        return len(cleaned) == 10
    if cleaned.startswith("7"):
        return len(cleaned) == 9
    return False


def normalize_rwanda_phone(phone: str) -> str:
    """Convert any accepted form to +250XXXXXXXXX; unknown forms pass through."""
    cleaned = _clean_phone(phone)
    if cleaned.startswith("+250"):
        return cleaned
    if cleaned.startswith("250"):
        return "+" + cleaned
    if cleaned.startswith("07"):
        return COUNTRY_CODE + cleaned[1:]
    if cleaned.startswith("7"):
        return COUNTRY_CODE + cleaned
    return phone


@dataclass
class PasswordStrength:
    is_valid: bool
    strength: str
    errors: list[str] = field(default_factory=list)


def check_password_strength(password: str) -> PasswordStrength:
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if not SPECIAL_CHARS_RE.search(password):
        errors.append("Password must contain at least one special character")

    if not errors:
        strength = "strong"
    elif len(errors) <= 2:
        strength = "medium"
    else:
        strength = "weak"

    return PasswordStrength(is_valid=not errors, strength=strength, errors=errors)
