"""
Password hashing with bcrypt.

Strength checks happen upstream in validation; this module only hashes
and compares.
"""

import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
MIN_ROUNDS = 10


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh bcrypt salt."""
    cost = max(rounds or DEFAULT_ROUNDS, MIN_ROUNDS)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=cost))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    Check a password against a stored bcrypt hash.

    Returns False for an empty or malformed hash instead of raising.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.debug("Stored password hash is not a valid bcrypt hash")
        return False
