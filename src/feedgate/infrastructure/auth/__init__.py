"""Authentication infrastructure components.

This module provides password hashing, the session token codec and the
bearer-token authenticator.
"""

from feedgate.infrastructure.auth.authenticator import Authenticator
from feedgate.infrastructure.auth.password_hasher import (
    dummy_password_hash,
    hash_password,
    verify_password,
)
from feedgate.infrastructure.auth.token_codec import TokenCodec
from feedgate.infrastructure.auth.token_types import AuthenticatedUser, SessionClaims

__all__ = [
    "AuthenticatedUser",
    "Authenticator",
    "SessionClaims",
    "TokenCodec",
    "dummy_password_hash",
    "hash_password",
    "verify_password",
]
