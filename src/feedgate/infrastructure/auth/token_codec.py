"""Token codec for issuing and verifying FeedGate session tokens.

Tokens are compact JWTs: ``<header>.<claims>.<signature>``, each segment
base64url encoded, signed with HMAC-SHA256. The header carries a ``kid``
naming the signing key so the secret can be rotated: new tokens are signed
with the current key while tokens signed with a retired key keep verifying
until they expire.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import ValidationError

from feedgate.core.config import Settings, get_settings
from feedgate.core.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from feedgate.infrastructure.auth.token_types import SessionClaims

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """Issue and verify stateless, time-bounded session tokens."""

    ALGORITHM = "HS256"
    DEFAULT_TTL = timedelta(hours=1)

    def __init__(
        self,
        secret: str,
        key_id: str = "k1",
        previous_keys: Mapping[str, str] | None = None,
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the codec.

        Args:
            secret: Current signing secret.
            key_id: Identifier of the current secret, written to the ``kid`` header.
            previous_keys: Retired secrets by key id, accepted for verification only.
            ttl: Lifetime of issued tokens.
            clock: Returns the current UTC time. Injectable for tests.
        """
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self.key_id = key_id
        self.ttl = ttl
        self._clock = clock
        self._keys: dict[str, str] = dict(previous_keys or {})
        self._keys[key_id] = secret

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TokenCodec":
        """Build a codec from application settings."""
        settings = settings or get_settings()
        return cls(
            secret=settings.secret_key,
            key_id=settings.secret_key_id,
            previous_keys=settings.previous_secret_keys,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue(self, email: str, user_id: str, ttl: timedelta | None = None) -> str:
        """Issue a signed token for a user.

        Args:
            email: The user's email address.
            user_id: The user's unique identifier.
            ttl: Custom lifetime. Defaults to the codec's TTL (one hour).

        Returns:
            Encoded token string.
        """
        now = self._clock()
        expire = now + (ttl if ttl is not None else self.ttl)
        payload = {
            "sub": user_id,
            "email": email,
            "userId": user_id,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(
            payload,
            self._keys[self.key_id],
            algorithm=self.ALGORITHM,
            headers={"kid": self.key_id},
        )

    def verify(self, token: str) -> SessionClaims:
        """Verify a token and return its claims.

        Args:
            token: The encoded token.

        Returns:
            Decoded session claims.

        Raises:
            MalformedTokenError: If the token is not three decodable segments
                or lacks a required claim.
            InvalidSignatureError: If the signature does not match, or the
                ``kid`` names no known key.
            TokenExpiredError: If the current time is at or past ``exp``.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError("Token must have 3 parts")

        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as e:
            raise MalformedTokenError() from e

        kid = header.get("kid", self.key_id)
        secret = self._keys.get(kid) if isinstance(kid, str) else None
        if secret is None:
            raise InvalidSignatureError("Unknown signing key")

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.ALGORITHM],
                # Expiry is checked below against the injected clock.
                options={"verify_exp": False, "verify_iat": False, "require": ["exp", "iat"]},
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError() from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError() from e

        try:
            claims = SessionClaims.model_validate(payload)
        except ValidationError as e:
            raise MalformedTokenError("Token claims are incomplete") from e

        if self._clock().timestamp() >= claims.expires_at:
            raise TokenExpiredError()

        return claims
