"""Core package - Shared configuration, errors, and domain types."""

from .config import Settings, configure_logging, get_settings
from .errors import ConfigurationError

__all__ = [
    "Settings",
    "configure_logging",
    "get_settings",
    "ConfigurationError",
]
