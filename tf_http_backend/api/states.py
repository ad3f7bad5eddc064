"""State operation endpoints.

Implements the Terraform HTTP backend protocol: GET/POST/DELETE on a state
address plus the LOCK and UNLOCK methods. Store errors are not handled here;
they propagate to the exception handlers in ``middleware.errors``.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect
from starlette.status import HTTP_200_OK, HTTP_201_CREATED

from tf_http_backend.core.logging import get_logger
from tf_http_backend.core.metrics import STATE_OPERATIONS_TOTAL
from tf_http_backend.state_store import (
    RequestBodyError,
    RosterResponse,
    StateLockedError,
    StateStore,
    StateStoreError,
)

logger = get_logger()

router = APIRouter(tags=["states"])

LOCK_METHOD = "LOCK"
UNLOCK_METHOD = "UNLOCK"


def get_store(request: Request) -> StateStore:
    """Get the state store attached to the application."""
    store: StateStore = request.app.state.store
    return store


@contextmanager
def _track(operation: str, name: str | None = None) -> Iterator[None]:
    """Count the outcome of one state operation."""
    try:
        yield
    except StateStoreError as e:
        STATE_OPERATIONS_TOTAL.labels(
            operation=operation, outcome=type(e).__name__
        ).inc()
        if isinstance(e, StateLockedError):
            logger.warning("state_locked", operation=operation, name=name)
        raise
    except Exception:
        STATE_OPERATIONS_TOTAL.labels(operation=operation, outcome="error").inc()
        raise
    else:
        STATE_OPERATIONS_TOTAL.labels(operation=operation, outcome="ok").inc()


@router.get("/", response_model=RosterResponse)
def list_states(store: StateStore = Depends(get_store)) -> RosterResponse:
    """List all states known to the store with their lock status."""
    with _track("list"):
        entries = store.list_states()
    return RosterResponse.from_entries(entries)


@router.get("/{name}")
def get_state(name: str, store: StateStore = Depends(get_store)) -> Response:
    """Return the raw content of a state."""
    logger.debug("state_request", method="GET", name=name)
    with _track("get", name):
        data = store.read(name)
    return Response(content=data, media_type="application/json")


@router.post("/{name}")
async def update_state(
    name: str, request: Request, store: StateStore = Depends(get_store)
) -> Response:
    """Create or replace the content of a state with the request body."""
    logger.debug("state_request", method="POST", name=name)
    with _track("update", name):
        if await run_in_threadpool(store.is_locked, name):
            raise StateLockedError(f"state {name} is locked", name=name)

        try:
            data = await request.body()
        except ClientDisconnect as e:
            raise RequestBodyError("failed to read request body", name=name) from e

        created = await run_in_threadpool(store.write, name, data)

    return Response(status_code=HTTP_201_CREATED if created else HTTP_200_OK)


@router.delete("/{name}")
def delete_state(name: str, store: StateStore = Depends(get_store)) -> Response:
    """Delete the content of a state; an already absent state is not an error."""
    logger.debug("state_request", method="DELETE", name=name)
    with _track("delete", name):
        removed = store.delete(name)
    if not removed:
        logger.debug("state_already_absent", name=name)
    return Response(status_code=HTTP_200_OK)


@router.api_route("/{name}", methods=[LOCK_METHOD], include_in_schema=False)
def lock_state(name: str, store: StateStore = Depends(get_store)) -> Response:
    logger.debug("state_request", method=LOCK_METHOD, name=name)
    with _track("lock", name):
        store.lock(name)
    return Response(status_code=HTTP_200_OK)


@router.api_route("/{name}", methods=[UNLOCK_METHOD], include_in_schema=False)
def unlock_state(name: str, store: StateStore = Depends(get_store)) -> Response:
    logger.debug("state_request", method=UNLOCK_METHOD, name=name)
    with _track("unlock", name):
        store.unlock(name)
    return Response(status_code=HTTP_200_OK)
