"""Authentication API routes.

Provides endpoints for user signup, login and the authenticated user's
own record.
"""

from fastapi import APIRouter, status

from feedgate.core.exceptions import NotAuthenticatedError
from feedgate.core.logging import get_logger
from feedgate.infrastructure.api.dependencies import (
    AuthServiceDep,
    CurrentUser,
    SignupValidatorDep,
)
from feedgate.infrastructure.api.schemas import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SignupRequest,
    SignupResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.put(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=SignupResponse,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)
async def signup(
    request: SignupRequest,
    service: AuthServiceDep,
    validator: SignupValidatorDep,
) -> SignupResponse:
    """Register a new user.

    All field errors are collected first and returned together with 422.
    """
    errors = validator.validate(request.email, request.name, request.password)
    result = await service.signup(
        email=request.email,
        name=request.name,
        password=request.password,
        errors=errors,
    )
    return SignupResponse(message=result.message, user_id=result.user_id)


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(request: LoginRequest, service: AuthServiceDep) -> LoginResponse:
    """Exchange email and password for a session token."""
    result = await service.login(email=request.email, password=request.password)
    return LoginResponse(token=result.token, user_id=result.user_id)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def me(current_user: CurrentUser, service: AuthServiceDep) -> MeResponse:
    """Return the record of the user the bearer token belongs to."""
    user = await service.get_user(current_user.user_id)
    if user is None:
        # Token is valid but the user it names no longer exists.
        logger.warning("Token names unknown user", user_id=current_user.user_id)
        raise NotAuthenticatedError()
    return MeResponse(user_id=user.id, email=user.email, name=user.name)
