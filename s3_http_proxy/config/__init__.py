"""
Application configuration using Pydantic settings.

Configuration comes from environment variables (or a .env file).
Missing required values are fatal at startup.
"""

from .errors import ConfigurationError, MissingConfigurationError
from .settings import Settings, get_settings, load_settings

__all__ = [
    "ConfigurationError",
    "MissingConfigurationError",
    "Settings",
    "get_settings",
    "load_settings",
]
