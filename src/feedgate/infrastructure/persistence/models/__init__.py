"""SQLAlchemy models for FeedGate."""

from feedgate.infrastructure.persistence.models.user import UserModel

__all__ = ["UserModel"]
