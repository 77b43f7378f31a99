"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Connection parameters for the bucket are required; everything else has
a default. A .env file in the working directory is read if present.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError, MissingConfigurationError

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Field names map to upper-case env vars (s3_endpoint -> S3_ENDPOINT).
    """

    # S3 Storage Configuration
    s3_endpoint: str = Field(
        default="",
        description="Base URL of the S3-compatible endpoint. Trailing slashes are stripped."
    )
    s3_region: str = Field(
        default="us-east-1",
        description="Region name used for request signing"
    )
    s3_access_key: str = Field(
        default="",
        description="Access key ID"
    )
    s3_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Secret access key"
    )
    s3_bucket_name: str = Field(
        default="",
        description="Bucket whose objects are served"
    )
    s3_path_style: bool = Field(
        default=True,
        description="Use endpoint/bucket/key addressing instead of bucket.endpoint/key"
    )
    s3_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound on a single object fetch"
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Interface to bind"
    )
    server_port: int = Field(
        default=8089,
        ge=0,
        le=65535,
        description="Port to listen on"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("s3_endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("s3_path_style", mode="before")
    @classmethod
    def _parse_path_style(cls, value: object) -> object:
        # Anything unrecognised means path-style.
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _FALSE_VALUES:
                return False
            if normalized not in _TRUE_VALUES:
                return True
        return value

    @property
    def debug_enabled(self) -> bool:
        """True when the configured log level is DEBUG."""
        return "debug" in self.log_level.lower()

    def validate_required_fields(self) -> list[str]:
        """
        Validate that the bucket connection parameters are set.

        Returns the env var names of missing fields, in a stable order.
        Empty strings count as missing.
        """
        missing = []

        if not self.s3_endpoint:
            missing.append("S3_ENDPOINT")
        if not self.s3_access_key:
            missing.append("S3_ACCESS_KEY")
        if not self.s3_secret_key.get_secret_value():
            missing.append("S3_SECRET_KEY")
        if not self.s3_bucket_name:
            missing.append("S3_BUCKET_NAME")

        return missing


def load_settings() -> Settings:
    """
    Load and validate settings, failing fast on bad configuration.

    Raises:
        MissingConfigurationError: a required parameter is absent
        ConfigurationError: a parameter could not be parsed (e.g. SERVER_PORT)
    """
    try:
        settings = Settings()
    except ValidationError as e:
        error = e.errors()[0]
        field_name = str(error["loc"][0]) if error.get("loc") else ""
        parameter = field_name.upper() or None
        raise ConfigurationError(
            f"{parameter or 'configuration'} is invalid: {error['msg']}",
            parameter=parameter,
        ) from e

    missing = settings.validate_required_fields()
    if missing:
        raise MissingConfigurationError(missing[0], missing)

    return settings


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached, validated settings instance.

    For tests, call get_settings.cache_clear() to reset.
    """
    return load_settings()
