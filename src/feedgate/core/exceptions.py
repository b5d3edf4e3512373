"""Error taxonomy for FeedGate.

Every error the auth core raises carries the HTTP status it maps to, a
client-facing message and optional structured detail. The application's
single exception handler turns any ``FeedGateError`` into
``{"message": ..., "data": ...}`` with ``status_code``.
"""

from typing import Any


class FeedGateError(Exception):
    """Base class for all FeedGate errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        data: Any = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.data = data
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "data": self.data}


class ValidationFailedError(FeedGateError):
    """Raised when signup input fails the field validation policy."""

    status_code = 422
    default_message = "Validation failed."


class InvalidCredentialsError(FeedGateError):
    """Raised on login with an unknown email or a wrong password.

    Both cases share one message so a caller cannot learn which emails
    are registered.
    """

    status_code = 401
    default_message = "Invalid email or password."


class NotAuthenticatedError(FeedGateError):
    """Raised when a protected request carries no usable credential."""

    status_code = 401
    default_message = "Not authenticated."


class TokenVerificationError(NotAuthenticatedError):
    """Base class for session token verification failures."""

    default_message = "Invalid token."


class MalformedTokenError(TokenVerificationError):
    default_message = "Malformed token."


class InvalidSignatureError(TokenVerificationError):
    default_message = "Invalid token signature."


class TokenExpiredError(TokenVerificationError):
    default_message = "Token has expired."


class PersistenceError(FeedGateError):
    """Raised when the credential store fails to write a record."""

    status_code = 500
    default_message = "Could not store user."


class DuplicateEmailError(PersistenceError):
    """Raised when signup hits the unique email constraint."""

    status_code = 409
    default_message = "A user with this email already exists."
