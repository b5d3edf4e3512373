"""Bearer-token authentication for protected FeedGate routes.

Turns the ``Authorization`` header of a request into the acting identity,
or raises the error that rejects the request.
"""

from feedgate.core.exceptions import NotAuthenticatedError, TokenVerificationError
from feedgate.core.logging import get_logger
from feedgate.infrastructure.auth.token_codec import TokenCodec
from feedgate.infrastructure.auth.token_types import AuthenticatedUser

logger = get_logger(__name__)

BEARER_SCHEME = "bearer"


class Authenticator:
    """Gate for protected requests, backed by a ``TokenCodec``."""

    def __init__(self, codec: TokenCodec) -> None:
        self.codec = codec

    def authenticate(self, authorization: str | None) -> AuthenticatedUser:
        """Authenticate from an ``Authorization`` header value.

        Expected format is ``Bearer <token>``. A header with the scheme but no
        token segment is verified as an empty token and fails as malformed.

        Args:
            authorization: Raw header value, or None when the header is absent.

        Returns:
            AuthenticatedUser: The identity embedded in the token.

        Raises:
            NotAuthenticatedError: If the header is absent, uses another
                scheme, or the token carries no user id.
            TokenVerificationError: If the token is malformed, tampered
                with, or expired.
        """
        if not authorization or not authorization.strip():
            logger.info("Authentication failed: missing Authorization header")
            raise NotAuthenticatedError()

        parts = authorization.split()
        if parts[0].lower() != BEARER_SCHEME:
            logger.info("Authentication failed: unsupported scheme", scheme=parts[0])
            raise NotAuthenticatedError()

        token = parts[1] if len(parts) > 1 else ""

        try:
            claims = self.codec.verify(token)
        except TokenVerificationError as e:
            logger.info(
                "Authentication failed: token rejected",
                reason=type(e).__name__,
            )
            raise

        if not claims.user_id:
            raise NotAuthenticatedError()

        return AuthenticatedUser(user_id=claims.user_id, email=claims.email)

