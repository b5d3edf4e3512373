"""FastAPI dependencies for authentication.

Provides the token gate for protected routes and the per-request
``AuthService``.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from feedgate.core.config import Settings, get_settings
from feedgate.domain.services import AuthService, SignupValidator
from feedgate.infrastructure.auth import AuthenticatedUser, Authenticator, TokenCodec
from feedgate.infrastructure.persistence.database import get_db_session


def get_token_codec(request: Request) -> TokenCodec:
    """Get the token codec built at application start."""
    return request.app.state.token_codec


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_signup_validator(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SignupValidator:
    return SignupValidator(password_min_length=settings.password_min_length)


async def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    validator: Annotated[SignupValidator, Depends(get_signup_validator)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthService:
    return AuthService(
        session=session,
        codec=codec,
        validator=validator,
        bcrypt_rounds=settings.bcrypt_rounds,
    )


async def get_current_user(
    request: Request,
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthenticatedUser:
    """Gate a protected route on a valid ``Authorization: Bearer`` token.

    On success the user id is also stored on ``request.state.user_id``.

    Raises:
        NotAuthenticatedError: 401 if the header is missing or carries no identity.
        TokenVerificationError: 401 if the token is malformed, tampered with, or expired.
    """
    user = Authenticator(codec).authenticate(authorization)
    request.state.user_id = user.user_id
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
SignupValidatorDep = Annotated[SignupValidator, Depends(get_signup_validator)]
