"""Pydantic schemas for authentication endpoints.

Field policy (email shape, password length, blank names) is enforced by
``SignupValidator`` so that all field errors come back together; the
request models only require the fields to be present strings.
"""

from typing import Any

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    """Request body for user signup."""

    email: str = Field(..., description="User's email address")
    name: str = Field(..., description="Display name")
    password: str = Field(..., description="User's password")


class LoginRequest(BaseModel):
    """Request body for user login."""

    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")


class SignupResponse(BaseModel):
    """Response for a successful signup."""

    message: str = Field(..., description="Confirmation message")
    user_id: str = Field(..., serialization_alias="userId", description="ID of the new user")


class LoginResponse(BaseModel):
    """Response for a successful login."""

    token: str = Field(..., description="Signed session token, valid for one hour")
    user_id: str = Field(..., serialization_alias="userId", description="ID of the user")


class MeResponse(BaseModel):
    """The authenticated user's own record."""

    user_id: str = Field(..., serialization_alias="userId", description="User ID")
    email: str = Field(..., description="User's email address")
    name: str = Field(..., description="Display name")


class ErrorResponse(BaseModel):
    """Shape of every error response."""

    message: str = Field(..., description="Human-readable error message")
    data: Any = Field(None, description="Structured detail, e.g. field errors")
