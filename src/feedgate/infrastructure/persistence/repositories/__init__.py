"""Persistence repositories for database operations."""

from feedgate.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = ["UserRepository"]
