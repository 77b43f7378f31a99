"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Configuration errors surface before any server is started
- Tests can inject an in-memory storage client
- Explicit about initialization order

For local development:
    uvicorn s3_http_proxy.main:create_app --factory --reload

For production:
    s3-http-proxy
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from . import __version__
from .api.routes import proxy
from .config.errors import ConfigurationError, MissingConfigurationError
from .config.settings import Settings, get_settings
from .infrastructure.storage.client import (
    ClientConstructionError,
    StorageClient,
    StorageConnectionConfig,
    create_storage_client,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> int:
    """
    Configure root logging. Returns the numeric level applied.

    Unknown level names fall back to INFO.
    """
    numeric_level = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format=LOG_FORMAT, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    return numeric_level


def log_startup_info(settings: Settings, storage: StorageClient) -> None:
    """
    Log the effective configuration.

    Secrets are never logged: at most the first four characters of the
    access key, and only the length of the secret key.
    """
    logger.info("Starting S3 HTTP Proxy Server")
    logger.info("Listening on: http://%s:%s", settings.server_host, settings.server_port)
    logger.info("Public URL: http://localhost:%s", settings.server_port)
    logger.info("S3 Endpoint: %s", settings.s3_endpoint)
    logger.info("S3 Region: %s", settings.s3_region)
    logger.info("S3 Bucket: %s", settings.s3_bucket_name)
    logger.info("Path Style: %s", settings.s3_path_style)
    logger.info("Log Level: %s", settings.log_level)

    if settings.debug_enabled:
        logger.info("Debug Mode: ENABLED - S3 calls will be logged in detail")
        logger.debug("S3 Access Key: %s***", settings.s3_access_key[:4])
        logger.debug(
            "S3 Secret Key: [REDACTED] (%d chars)",
            len(settings.s3_secret_key.get_secret_value()),
        )
        logger.debug("Bucket URL: %s", storage.object_url(""))
        logger.debug("Bucket Name: %s", storage.bucket_name)
        logger.debug("Bucket Region: %s", storage.region)
    else:
        logger.info("Debug Mode: DISABLED - Set LOG_LEVEL=debug for detailed S3 logging")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    The storage client already exists when the app is built; startup only
    reports configuration. Nothing needs closing on shutdown.
    """
    settings: Optional[Settings] = app.state.settings
    if settings is not None:
        log_startup_info(settings, app.state.storage_client)

    logger.info("Server ready to accept connections")

    yield

    logger.info("S3 HTTP Proxy shutting down")


def create_app(
    settings: Optional[Settings] = None,
    storage_client: Optional[StorageClient] = None,
) -> FastAPI:
    """
    Application factory.

    Builds the storage client from settings unless one is injected.

    Raises:
        ConfigurationError: required settings are missing or invalid
        ClientConstructionError: the storage client could not be created
    """
    if storage_client is None:
        if settings is None:
            settings = get_settings()
        else:
            missing = settings.validate_required_fields()
            if missing:
                raise MissingConfigurationError(missing[0], missing)

        storage_client = create_storage_client(
            config=StorageConnectionConfig.from_settings(settings)
        )

    # Docs routes are disabled: every path belongs to the bucket.
    app = FastAPI(
        title="S3 HTTP Proxy",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage_client = storage_client

    app.include_router(proxy.router, tags=["Proxy"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. The full error is
        logged server-side.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return PlainTextResponse("Internal server error", status_code=500)

    logger.debug(
        "FastAPI application created",
        extra={"bucket": storage_client.bucket_name, "version": __version__}
    )

    return app


def run() -> None:
    """
    Console entry point.

    Exits with status 1, before binding any socket, if configuration is
    missing or the storage client cannot be created.
    """
    try:
        settings = get_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("Invalid configuration: %s", e, extra={"parameter": e.parameter})
        sys.exit(1)

    log_level = configure_logging(settings.log_level)

    try:
        app = create_app(settings)
    except ClientConstructionError as e:
        logger.error("Failed to create storage client: %s", e)
        sys.exit(1)

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=log_level,
    )


if __name__ == "__main__":
    run()
