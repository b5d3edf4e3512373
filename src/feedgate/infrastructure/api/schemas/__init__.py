"""API request and response schemas."""

from feedgate.infrastructure.api.schemas.auth_schemas import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SignupRequest,
    SignupResponse,
)

__all__ = [
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "SignupRequest",
    "SignupResponse",
]
