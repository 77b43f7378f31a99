"""
Object proxy endpoint.

Every GET path is treated as an object key in the configured bucket:

    GET /images/logo.png  ->  GetObject(Key="images/logo.png")

Found objects are returned byte-for-byte with a resolved Content-Type.
Any failure (missing key, denied, timeout, network) is reported to the
caller as the same 404 so backend details never leak; the real cause is
only logged.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from ...core.content_type import resolve_content_type
from ...infrastructure.storage.client import FetchErrorKind, ObjectFetchError
from ..dependencies import StorageClientDep

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_BODY = "File not found"


@router.get(
    "/{file_path:path}",
    summary="Serve an object from the bucket",
    responses={404: {"description": "Object could not be fetched"}},
)
async def proxy_object(file_path: str, storage: StorageClientDep) -> Response:
    """
    Fetch `file_path` from the bucket and return it.

    The key is used verbatim, including the empty key for `GET /`.
    A single fetch attempt is made per request.
    """
    logger.info("Received request for object %s", file_path)
    logger.debug(
        "S3 GetObject call: bucket=%s region=%s endpoint=%s key=%s path_style=%s url=%s",
        storage.bucket_name,
        storage.region,
        storage.endpoint,
        file_path,
        storage.path_style,
        storage.object_url(file_path),
        extra={"key": file_path, "bucket": storage.bucket_name},
    )

    start_time = time.perf_counter()

    try:
        stored = await storage.get_object(file_path)
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        kind = e.kind if isinstance(e, ObjectFetchError) else FetchErrorKind.UNKNOWN
        detail = e.detail if isinstance(e, ObjectFetchError) else f"{type(e).__name__}: {e}"

        logger.warning(
            "File not found: %s (%s)",
            file_path,
            kind.value,
            extra={"key": file_path, "kind": kind.value},
        )
        logger.debug(
            "Failed S3 call for %s after %.2f ms (%s): %s",
            file_path,
            elapsed_ms,
            kind.value,
            detail,
            extra={
                "key": file_path,
                "kind": kind.value,
                "error": detail,
                "elapsed_ms": round(elapsed_ms, 2),
            }
        )

        return PlainTextResponse(NOT_FOUND_BODY, status_code=404)

    elapsed_ms = (time.perf_counter() - start_time) * 1000

    logger.info(
        "Successfully served file: %s (%d bytes)",
        file_path,
        stored.content_length,
    )
    logger.debug(
        "S3 call for %s completed in %.2f ms: status %d, %d bytes",
        file_path,
        elapsed_ms,
        stored.status_code,
        stored.content_length,
        extra={
            "key": file_path,
            "status_code": stored.status_code,
            "content_length": stored.content_length,
            "elapsed_ms": round(elapsed_ms, 2),
        }
    )
    for name, value in stored.headers.items():
        logger.debug("S3 response header %s: %s", name, value, extra={"key": file_path})

    content_type = resolve_content_type(file_path, stored.headers)
    logger.debug("Content-Type determined as %s", content_type, extra={"key": file_path})

    # Set the header directly; media_type would append a charset to text/*.
    return Response(
        content=stored.body,
        status_code=200,
        headers={"Content-Type": content_type},
    )
