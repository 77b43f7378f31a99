"""
FastAPI dependency injection.

The storage client is built once by the application factory and kept on
app.state. Routes receive it through StorageClientDep instead of reaching
for a module global, so tests can inject a mock per app instance.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from ..infrastructure.storage.client import StorageClient

logger = logging.getLogger(__name__)


def get_storage_client(request: Request) -> StorageClient:
    """Provide the shared, read-only storage client."""
    return request.app.state.storage_client


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

StorageClientDep = Annotated[StorageClient, Depends(get_storage_client)]
