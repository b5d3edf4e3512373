"""Domain services for FeedGate."""

from feedgate.domain.services.auth_service import AuthService, LoginResult, SignupResult
from feedgate.domain.services.signup_validator import (
    FieldValidationError,
    SignupInput,
    SignupValidator,
    normalize_email,
)

__all__ = [
    "AuthService",
    "FieldValidationError",
    "LoginResult",
    "SignupInput",
    "SignupResult",
    "SignupValidator",
    "normalize_email",
]
