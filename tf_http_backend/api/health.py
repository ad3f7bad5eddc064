"""Operational endpoints under the ``/-/`` prefix.

State names are a single path segment, so two-segment paths never collide
with them.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from tf_http_backend.api.states import get_store
from tf_http_backend.core.logging import get_logger
from tf_http_backend.state_store import StateStore, StorageInitError

logger = get_logger()

router = APIRouter(prefix="/-", include_in_schema=False)


@router.get("/health")
def health(store: StateStore = Depends(get_store)) -> JSONResponse:
    """Check that the storage root is still readable and writable."""
    try:
        store.probe_access()
    except StorageInitError as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "storage": str(store.storage_path)},
        )

    return JSONResponse(
        status_code=HTTP_200_OK,
        content={"status": "ok", "storage": str(store.storage_path)},
    )


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
