"""
Unit tests for configuration loading.

Environment variables are set with monkeypatch; the autouse clean_env
fixture guarantees nothing leaks in from the host.
"""

import pytest

from s3_http_proxy.config import (
    ConfigurationError,
    MissingConfigurationError,
    Settings,
    get_settings,
    load_settings,
)


class TestSettingsDefaults:
    """Optional settings fall back to fixed defaults."""

    def test_defaults(self, s3_env):
        settings = load_settings()

        assert settings.s3_region == "us-east-1"
        assert settings.s3_path_style is True
        assert settings.s3_timeout_seconds == 30.0
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8089
        assert settings.log_level == "INFO"
        assert settings.debug_enabled is False

    def test_values_are_read_from_env(self, s3_env, monkeypatch):
        monkeypatch.setenv("S3_REGION", "eu-central-1")
        monkeypatch.setenv("SERVER_PORT", "9000")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.s3_access_key == "AKIAEXAMPLEKEY"
        assert settings.s3_bucket_name == "assets"
        assert settings.s3_region == "eu-central-1"
        assert settings.server_port == 9000
        assert settings.debug_enabled is True

    def test_dotenv_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text(
            "S3_ENDPOINT=http://minio:9000\n"
            "S3_ACCESS_KEY=minio\n"
            "S3_SECRET_KEY=minio123\n"
            "S3_BUCKET_NAME=public\n"
        )

        settings = load_settings()

        assert settings.s3_endpoint == "http://minio:9000"
        assert settings.s3_bucket_name == "public"


class TestEndpointNormalization:

    @pytest.mark.parametrize("raw", [
        "https://example.com/",
        "https://example.com//",
        "https://example.com",
    ])
    def test_trailing_separators_are_stripped(self, s3_env, monkeypatch, raw):
        monkeypatch.setenv("S3_ENDPOINT", raw)
        assert load_settings().s3_endpoint == "https://example.com"


class TestPathStyle:

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("TRUE", True),
        ("false", False),
        ("False", False),
        ("0", False),
        ("not-a-bool", True),
    ])
    def test_flag_parsing(self, s3_env, monkeypatch, raw, expected):
        """Unparsable values keep the path-style default."""
        monkeypatch.setenv("S3_PATH_STYLE", raw)
        assert load_settings().s3_path_style is expected


class TestRequiredFields:
    """Missing connection parameters are fatal and named."""

    @pytest.mark.parametrize("name", [
        "S3_ENDPOINT",
        "S3_ACCESS_KEY",
        "S3_SECRET_KEY",
        "S3_BUCKET_NAME",
    ])
    def test_missing_parameter_is_named(self, s3_env, monkeypatch, name):
        monkeypatch.delenv(name)

        with pytest.raises(MissingConfigurationError) as exc_info:
            load_settings()

        assert exc_info.value.parameter == name
        assert name in str(exc_info.value)

    def test_empty_value_counts_as_missing(self, s3_env, monkeypatch):
        monkeypatch.setenv("S3_BUCKET_NAME", "")

        with pytest.raises(MissingConfigurationError, match="S3_BUCKET_NAME"):
            load_settings()

    def test_all_missing_parameters_are_reported(self):
        with pytest.raises(MissingConfigurationError) as exc_info:
            load_settings()

        assert exc_info.value.missing == [
            "S3_ENDPOINT",
            "S3_ACCESS_KEY",
            "S3_SECRET_KEY",
            "S3_BUCKET_NAME",
        ]

    def test_missing_configuration_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            get_settings()


class TestInvalidValues:

    @pytest.mark.parametrize("raw", ["not-a-port", "70000", "-1"])
    def test_bad_port_is_a_configuration_error(self, s3_env, monkeypatch, raw):
        monkeypatch.setenv("SERVER_PORT", raw)

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert exc_info.value.parameter == "SERVER_PORT"

    def test_non_positive_timeout_is_rejected(self, s3_env, monkeypatch):
        monkeypatch.setenv("S3_TIMEOUT_SECONDS", "0")

        with pytest.raises(ConfigurationError, match="S3_TIMEOUT_SECONDS"):
            load_settings()


class TestSecrets:

    def test_secret_key_is_hidden_in_repr(self, s3_env):
        settings = load_settings()

        assert "super-secret-value" not in repr(settings)
        assert settings.s3_secret_key.get_secret_value() == "super-secret-value"

    def test_validate_required_fields_on_complete_settings(self):
        settings = Settings(
            _env_file=None,
            s3_endpoint="http://localhost:9000",
            s3_access_key="key",
            s3_secret_key="secret",
            s3_bucket_name="bucket",
        )
        assert settings.validate_required_fields() == []


class TestSettingsCache:

    def test_settings_are_cached(self, s3_env):
        assert get_settings() is get_settings()
