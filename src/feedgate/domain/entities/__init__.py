"""Domain entities for FeedGate."""

from feedgate.domain.entities.user import MAX_NAME_LENGTH, User

__all__ = ["MAX_NAME_LENGTH", "User"]
