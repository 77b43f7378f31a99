"""
Object storage client for serving bucket contents.

Supports any S3-compatible backend (AWS S3, MinIO, Ceph, R2, ...) through
boto3, with an in-memory mock for local development and tests.

The client is built once at startup and shared by every request. It holds
no per-request state, so concurrent fetches need no locking. boto3 is
synchronous; fetches run in a worker thread so the event loop stays free.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol
from urllib.parse import urlsplit

from boto3.session import Session
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    HTTPClientError,
    ParamValidationError,
    ReadTimeoutError,
)

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404", "NoSuchBucket"}
_ACCESS_DENIED_CODES = {"AccessDenied", "Forbidden", "403", "InvalidAccessKeyId", "SignatureDoesNotMatch"}


class StorageClientError(Exception):
    """Base class for storage failures."""
    pass


class ClientConstructionError(StorageClientError):
    """Raised when the boto3 client cannot be built. Fatal at startup."""
    pass


class FetchErrorKind(Enum):
    """Why an object fetch failed. Diagnostic only; clients always see 404."""
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_KEY = "invalid_key"
    TIMEOUT = "timeout"
    NETWORK = "network"
    UNKNOWN = "unknown"


class ObjectFetchError(StorageClientError):
    """Raised when an object cannot be retrieved, for any reason."""

    def __init__(self, kind: FetchErrorKind, detail: str) -> None:
        super().__init__(f"{kind.value}: {detail}")
        self.kind = kind
        self.detail = detail


@dataclass(frozen=True)
class StorageConnectionConfig:
    """
    Connection parameters for the bucket.

    Frozen because the client derived from it is shared for the whole
    process lifetime; nothing may change underneath it.
    """
    endpoint_url: str
    access_key: str
    secret_key: str = field(repr=False)
    bucket_name: str
    region: str = "us-east-1"
    path_style: bool = True
    timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, settings) -> "StorageConnectionConfig":
        """Build from application Settings."""
        return cls(
            endpoint_url=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key.get_secret_value(),
            bucket_name=settings.s3_bucket_name,
            region=settings.s3_region,
            path_style=settings.s3_path_style,
            timeout_seconds=settings.s3_timeout_seconds,
        )


@dataclass(frozen=True)
class StoredObject:
    """A fetched object: raw bytes plus the backend's response metadata."""
    body: bytes
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content_length(self) -> int:
        return len(self.body)


class StorageClient(Protocol):
    """
    Protocol for read-only object storage.

    Using a protocol means tests can provide mocks and the request
    handler never touches boto3 directly.
    """

    @property
    def bucket_name(self) -> str: ...

    @property
    def region(self) -> str: ...

    @property
    def endpoint(self) -> str: ...

    @property
    def path_style(self) -> bool: ...

    def object_url(self, key: str) -> str:
        """URL a fetch for `key` is sent to."""
        ...

    async def get_object(self, key: str) -> StoredObject:
        """Fetch an object by key. Raises ObjectFetchError on any failure."""
        ...


class S3StorageClient:
    """
    S3-compatible storage client bound to one bucket.

    Construction performs no network I/O; bad credentials surface on the
    first fetch. Each fetch is a single attempt bounded by the configured
    timeout.
    """

    def __init__(self, config: StorageConnectionConfig) -> None:
        self._config = config
        self._endpoint = config.endpoint_url.rstrip("/")

        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if config.path_style else "virtual"},
            connect_timeout=config.timeout_seconds,
            read_timeout=config.timeout_seconds,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )

        try:
            session = Session(
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                region_name=config.region,
            )
            self._s3_client = session.client(
                "s3",
                endpoint_url=self._endpoint,
                config=boto_config,
            )
        except Exception as e:
            logger.error(
                "Failed to create S3 client",
                extra={"endpoint": self._endpoint, "error": str(e)}
            )
            raise ClientConstructionError(f"Failed to create S3 bucket client: {e}") from e

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": self._endpoint,
                "path_style": config.path_style,
            }
        )

    @property
    def bucket_name(self) -> str:
        return self._config.bucket_name

    @property
    def region(self) -> str:
        return self._config.region

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def path_style(self) -> bool:
        return self._config.path_style

    @property
    def timeout_seconds(self) -> float:
        return self._config.timeout_seconds

    @property
    def bucket_host(self) -> str:
        """Host requests are sent to (bucket-prefixed for virtual-host style)."""
        host = urlsplit(self._endpoint).netloc
        if self.path_style:
            return host
        return f"{self.bucket_name}.{host}"

    def object_url(self, key: str) -> str:
        """
        Compose the URL for an object.

        Path style:         {endpoint}/{bucket}/{key}
        Virtual-host style: {scheme}://{bucket}.{host}{base_path}/{key}
        """
        if self.path_style:
            return f"{self._endpoint}/{self.bucket_name}/{key}"
        parts = urlsplit(self._endpoint)
        return f"{parts.scheme}://{self.bucket_host}{parts.path}/{key}"

    async def get_object(self, key: str) -> StoredObject:
        """
        Fetch an object from the bucket.

        The key is sent verbatim. Every failure, including the timeout,
        is raised as ObjectFetchError.
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._get_object_sync, key),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ObjectFetchError(
                FetchErrorKind.TIMEOUT,
                f"No response within {self._config.timeout_seconds}s",
            ) from e
        except ObjectFetchError:
            raise
        except Exception as e:
            error = classify_fetch_error(e)
            logger.debug(
                "S3 GetObject failed",
                extra={"key": key, "kind": error.kind.value, "error": error.detail}
            )
            raise error from e

    def _get_object_sync(self, key: str) -> StoredObject:
        # The worker thread outlives an expired wait_for, so the body read
        # enforces the same deadline itself and gives the thread back.
        deadline = time.monotonic() + self._config.timeout_seconds

        response = self._s3_client.get_object(
            Bucket=self._config.bucket_name,
            Key=key,
        )

        body = response["Body"]
        chunks = []
        try:
            for chunk in body.iter_chunks(chunk_size=_READ_CHUNK_SIZE):
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise ObjectFetchError(
                        FetchErrorKind.TIMEOUT,
                        f"Body not received within {self._config.timeout_seconds}s",
                    )
        finally:
            body.close()
        data = b"".join(chunks)

        metadata = response.get("ResponseMetadata", {})
        return StoredObject(
            body=data,
            status_code=metadata.get("HTTPStatusCode", 200),
            headers=dict(metadata.get("HTTPHeaders", {})),
        )


def classify_fetch_error(exc: Exception) -> ObjectFetchError:
    """Map a boto3/botocore exception onto a FetchErrorKind."""
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = str(error.get("Code", ""))
        status_code = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        detail = f"{code}: {error.get('Message', '')}".strip()

        if code in _NOT_FOUND_CODES or status_code == 404:
            return ObjectFetchError(FetchErrorKind.NOT_FOUND, detail)
        if code in _ACCESS_DENIED_CODES or status_code == 403:
            return ObjectFetchError(FetchErrorKind.ACCESS_DENIED, detail)
        return ObjectFetchError(FetchErrorKind.UNKNOWN, detail)

    if isinstance(exc, ParamValidationError):
        return ObjectFetchError(FetchErrorKind.INVALID_KEY, str(exc))

    # Timeout errors subclass the connection errors; check them first.
    if isinstance(exc, (ConnectTimeoutError, ReadTimeoutError)):
        return ObjectFetchError(FetchErrorKind.TIMEOUT, str(exc))

    if isinstance(exc, (EndpointConnectionError, HTTPClientError)):
        return ObjectFetchError(FetchErrorKind.NETWORK, str(exc))

    return ObjectFetchError(FetchErrorKind.UNKNOWN, f"{type(exc).__name__}: {exc}")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory bucket for local development and tests.

    Objects are seeded with put_object(); get_object() behaves like the
    S3 client, including raising ObjectFetchError for unknown keys.
    """

    def __init__(self, bucket_name: str = "mock-bucket") -> None:
        self._bucket_name = bucket_name
        self._objects: dict[str, StoredObject] = {}
        logger.info("Initialized mock storage client (in-memory)")

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    @property
    def region(self) -> str:
        return "mock"

    @property
    def endpoint(self) -> str:
        return "mock://storage"

    @property
    def path_style(self) -> bool:
        return True

    def object_url(self, key: str) -> str:
        return f"{self.endpoint}/{self._bucket_name}/{key}"

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        """Store an object. content_type, if given, is returned as a header."""
        headers = {"content-length": str(len(data))}
        if content_type is not None:
            headers["Content-Type"] = content_type
        self._objects[key] = StoredObject(body=data, status_code=200, headers=headers)

    async def get_object(self, key: str) -> StoredObject:
        """Retrieve object from memory."""
        if key not in self._objects:
            raise ObjectFetchError(FetchErrorKind.NOT_FOUND, f"Object not found: {key}")

        return self._objects[key]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(config: StorageConnectionConfig) -> StorageClient:
    """
    Create the S3 storage client for the configured bucket.

    Tests inject a MockStorageClient into create_app instead.

    Raises:
        ClientConstructionError: boto3 rejected the configuration
    """
    return S3StorageClient(config)
