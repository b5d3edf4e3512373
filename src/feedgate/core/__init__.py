"""Core FeedGate utilities.

This module exports core utilities for use throughout the application.
"""

from feedgate.core.config import Settings, get_settings
from feedgate.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "bind_correlation_id",
    "clear_context",
]
