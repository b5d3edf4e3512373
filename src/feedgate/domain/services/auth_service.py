"""Signup and login.

``AuthService`` registers users and exchanges credentials for session
tokens. It raises ``FeedGateError`` subclasses; turning them into HTTP
responses is the API layer's job.
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from feedgate.core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    PersistenceError,
    ValidationFailedError,
)
from feedgate.core.logging import get_logger
from feedgate.domain.entities import User
from feedgate.domain.services.signup_validator import (
    FieldValidationError,
    SignupValidator,
    normalize_email,
)
from feedgate.infrastructure.auth import (
    TokenCodec,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from feedgate.infrastructure.persistence.models import UserModel
from feedgate.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class SignupResult:
    user_id: str
    message: str = "User created!"


@dataclass(frozen=True)
class LoginResult:
    token: str
    user_id: str


class AuthService:
    """Registers users and issues session tokens."""

    def __init__(
        self,
        session: AsyncSession,
        codec: TokenCodec,
        validator: SignupValidator | None = None,
        bcrypt_rounds: int | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            session: Database session for the current request.
            codec: Token codec used to sign session tokens.
            validator: Signup field validator. Defaults to the standard policy.
            bcrypt_rounds: Work factor override. Defaults to the configured value.
        """
        self.session = session
        self.users = UserRepository(session)
        self.codec = codec
        self.validator = validator or SignupValidator()
        self.bcrypt_rounds = bcrypt_rounds

    async def signup(
        self,
        email: str,
        name: str,
        password: str,
        errors: Sequence[FieldValidationError] | None = None,
    ) -> SignupResult:
        """Register a new user.

        Flow:
        1. Reject if validation produced errors
        2. Hash password
        3. Persist user
        4. Return the new user's id

        Args:
            email: Submitted email address.
            name: Submitted display name.
            password: Submitted plaintext password.
            errors: Field errors from an upstream validation pass. When None,
                the service validates the fields itself.

        Returns:
            SignupResult: The new user's id and a confirmation message.

        Raises:
            ValidationFailedError: If there are field errors. Nothing is hashed or stored.
            DuplicateEmailError: If the email is already registered.
            PersistenceError: If the store rejects the write for another reason.
        """
        if errors is None:
            errors = self.validator.validate(email, name, password)
        if errors:
            logger.info("Signup failed: validation", error_count=len(errors))
            raise ValidationFailedError(data=[e.to_dict() for e in errors])

        fields = self.validator.normalize(email, name, password)

        password_hash = await run_in_threadpool(
            hash_password, fields.password, self.bcrypt_rounds
        )

        user = UserModel(
            id=str(uuid.uuid4()),
            email=fields.email,
            name=fields.name,
            password_hash=password_hash,
        )

        try:
            await self.users.create(user)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if await self.users.email_exists(fields.email):
                logger.info("Signup failed: email already registered", email=fields.email)
                raise DuplicateEmailError() from e
            logger.error("Signup failed: integrity error", error=str(e.orig))
            raise PersistenceError() from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Signup failed: store error", error=str(e))
            raise PersistenceError() from e

        logger.info("User created", user_id=user.id, email=user.email)
        return SignupResult(user_id=user.id)

    async def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a session token.

        Unknown email and wrong password raise the same error, and both
        paths run one bcrypt verification.

        Args:
            email: Submitted email address.
            password: Submitted plaintext password.

        Returns:
            LoginResult: Signed token and the user's id.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong.
        """
        user = await self.users.get_by_email(normalize_email(email))

        if user is None:
            await run_in_threadpool(
                verify_password, password, dummy_password_hash(self.bcrypt_rounds)
            )
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("Login failed: invalid password", user_id=user.id)
            raise InvalidCredentialsError()

        token = self.codec.issue(email=user.email, user_id=user.id)
        logger.info("User logged in", user_id=user.id)
        return LoginResult(token=token, user_id=user.id)

    async def get_user(self, user_id: str) -> User | None:
        """Load a user by id, as a domain entity."""
        model = await self.users.get_by_id(user_id)
        return model.to_entity() if model else None
