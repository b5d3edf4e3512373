"""User entity for authentication.

Users are uniquely identified by email. The record is written once at
signup and read-only afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

# Width of the users.name column
MAX_NAME_LENGTH = 255


@dataclass
class User:
    """User entity representing a registered identity.

    Attributes:
        id: Unique identifier (UUID string).
        email: User's email address, unique across all users.
        name: Display name, not unique.
        password_hash: Hashed password (never store plaintext).
        created_at: Timestamp when the user was created.
    """

    id: str
    email: str
    name: str
    password_hash: str = field(repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.id:
            raise ValueError("User ID is required")
        if not self.email:
            raise ValueError("Email is required")
        if not self.password_hash:
            raise ValueError("Password hash is required")
