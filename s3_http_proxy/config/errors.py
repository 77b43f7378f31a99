"""Startup configuration errors."""

from typing import Optional


class ConfigurationError(Exception):
    """
    Raised when the process cannot be configured.

    Fatal: the server must not start. `parameter` names the offending
    environment variable when one can be identified.
    """

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(message)
        self.parameter = parameter


class MissingConfigurationError(ConfigurationError):
    """Raised when a required parameter is absent or empty."""

    def __init__(self, parameter: str, missing: Optional[list[str]] = None) -> None:
        names = missing or [parameter]
        super().__init__(
            f"{parameter} environment variable is required "
            f"(missing: {', '.join(names)})",
            parameter=parameter,
        )
        self.missing = names
