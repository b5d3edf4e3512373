"""Token payload models for FeedGate session tokens.

Defines the claims carried by a session token and the identity handed to
protected routes once a token has been verified.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class SessionClaims(BaseModel):
    """Claims decoded from a verified session token.

    Field aliases are the claim names on the wire.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    email: str = Field(..., min_length=1, description="User's email address")
    user_id: str = Field(..., alias="userId", min_length=1, description="Unique identifier of the user")
    issued_at: int = Field(..., alias="iat", description="Unix timestamp when the token was issued")
    expires_at: int = Field(..., alias="exp", description="Unix timestamp when the token expires")

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)


@dataclass(frozen=True)
class AuthenticatedUser:
    """The acting identity attached to a request that passed the token gate."""

    user_id: str
    email: str
