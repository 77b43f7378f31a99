"""
Shared fixtures.

Every test starts from a clean environment: no S3_* / SERVER_* variables,
an empty working directory (so no stray .env file is read), and a cleared
settings cache.
"""

import pytest
from fastapi.testclient import TestClient

from s3_http_proxy.config.settings import get_settings
from s3_http_proxy.infrastructure.storage.client import MockStorageClient
from s3_http_proxy.main import create_app

ENV_VARS = (
    "S3_ENDPOINT",
    "S3_REGION",
    "S3_ACCESS_KEY",
    "S3_SECRET_KEY",
    "S3_BUCKET_NAME",
    "S3_PATH_STYLE",
    "S3_TIMEOUT_SECONDS",
    "SERVER_HOST",
    "SERVER_PORT",
    "LOG_LEVEL",
)


class FailingStorageClient(MockStorageClient):
    """Storage client whose every fetch fails with the given exception."""

    def __init__(self, error: Exception) -> None:
        super().__init__()
        self._error = error

    async def get_object(self, key: str):
        raise self._error


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def s3_env(monkeypatch):
    """A complete, valid set of connection variables."""
    values = {
        "S3_ENDPOINT": "https://storage.example.com/",
        "S3_ACCESS_KEY": "AKIAEXAMPLEKEY",
        "S3_SECRET_KEY": "super-secret-value",
        "S3_BUCKET_NAME": "assets",
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values


@pytest.fixture
def storage() -> MockStorageClient:
    return MockStorageClient(bucket_name="assets")


@pytest.fixture
def client(storage: MockStorageClient) -> TestClient:
    return TestClient(create_app(storage_client=storage))


@pytest.fixture
def failing_client():
    """Build a TestClient whose storage raises `error` on every fetch."""
    def _make(error: Exception) -> TestClient:
        return TestClient(create_app(storage_client=FailingStorageClient(error)))
    return _make
