"""Signup input validation.

Validates the fields of a signup request against the registration policy:
- Email must be a well-formed address
- Password must have a minimum length after trimming
- Name must not be blank after trimming, and must fit the name column

Validation collects every failing field instead of stopping at the first,
so the client can show all problems at once.
"""

from dataclasses import asdict, dataclass

from email_validator import EmailNotValidError, validate_email

from feedgate.domain.entities import MAX_NAME_LENGTH
from feedgate.infrastructure.auth.password_hasher import MAX_PASSWORD_BYTES


@dataclass(frozen=True)
class FieldValidationError:
    """Represents a single field validation error.

    Attributes:
        field: The field name.
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class SignupInput:
    """Normalized signup fields, produced by ``SignupValidator.normalize``."""

    email: str
    name: str
    password: str


class SignupValidator:
    """Validates signup fields.

    Default policy:
    - Email is RFC-shaped (deliverability is not checked)
    - Password has at least 5 characters after trimming
    - Password fits in bcrypt's 72-byte input
    - Name is non-empty and at most 255 characters after trimming
    """

    def __init__(self, password_min_length: int = 5) -> None:
        """Initialize the signup validator.

        Args:
            password_min_length: Minimum password length (default 5).
        """
        self.password_min_length = password_min_length

    def validate(self, email: str, name: str, password: str) -> list[FieldValidationError]:
        """Validate signup fields against the policy.

        Args:
            email: Submitted email address.
            name: Submitted display name.
            password: Submitted plaintext password.

        Returns:
            List of validation errors. Empty list if all fields are valid.
        """
        errors: list[FieldValidationError] = []

        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors.append(
                FieldValidationError(
                    field="email",
                    message="Please enter a valid email.",
                    code="email_invalid",
                )
            )

        if len(password.strip()) < self.password_min_length:
            errors.append(
                FieldValidationError(
                    field="password",
                    message=f"Password must be at least {self.password_min_length} characters",
                    code="password_too_short",
                )
            )
        elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            errors.append(
                FieldValidationError(
                    field="password",
                    message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                    code="password_too_long",
                )
            )

        if not name.strip():
            errors.append(
                FieldValidationError(
                    field="name",
                    message="Name must not be empty",
                    code="name_empty",
                )
            )
        elif len(name.strip()) > MAX_NAME_LENGTH:
            errors.append(
                FieldValidationError(
                    field="name",
                    message=f"Name must be at most {MAX_NAME_LENGTH} characters",
                    code="name_too_long",
                )
            )

        return errors

    def normalize(self, email: str, name: str, password: str) -> SignupInput:
        """Return the stored form of already-validated fields.

        The email is normalized by ``email-validator`` (domain lower-cased)
        and the name is trimmed. The password is kept exactly as typed.
        """
        return SignupInput(email=normalize_email(email), name=name.strip(), password=password)


def normalize_email(email: str) -> str:
    """Return the canonical form of an email, or the trimmed input if it is not valid."""
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email.strip()
