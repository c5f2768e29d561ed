"""
Password hashing utilities.
Uses bcrypt for secure password hashing.
"""
import bcrypt
from functools import lru_cache

from gallery_cms.config import settings

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password (at most 72 bytes)

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hashed password.

    An empty hash (Google-only account) or a malformed hash never matches.

    Args:
        password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        return False


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """Hash compared against when an email is unknown, so both failure paths cost a bcrypt check."""
    return hash_password("not-a-real-password")


def is_admin_email(email: str) -> bool:
    """Only the configured ADMIN_EMAIL may act as administrator."""
    return bool(email) and email.strip().lower() == settings.ADMIN_EMAIL.strip().lower()
