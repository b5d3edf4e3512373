"""Password hashing utility using bcrypt.

Provides salted one-way password hashing and verification. The work factor
comes from ``Settings.bcrypt_rounds`` (12 by default).
"""

from functools import lru_cache

import bcrypt

from feedgate.core.config import get_settings

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Args:
        password: The plaintext password to hash.
        rounds: Work factor override. Defaults to the configured value.

    Returns:
        The hashed password string.

    Example:
        >>> hashed = hash_password("password123")
        >>> hashed.startswith("$2b$")
        True
    """
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a hash.

    Uses bcrypt's constant-time comparison. A hash that bcrypt cannot parse
    never matches.

    Args:
        password: The plaintext password to verify.
        hashed: The hashed password to verify against.

    Returns:
        True if the password matches, False otherwise.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError):
        return False


@lru_cache
def dummy_password_hash(rounds: int | None = None) -> str:
    """Hash checked against when a login names an unknown email.

    Running one verification on that path too keeps both login failure
    branches at the same cost.
    """
    return hash_password("dummy_password_for_timing_safety", rounds=rounds)
