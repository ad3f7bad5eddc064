"""Tests for error handling middleware."""

from unittest.mock import MagicMock

import pytest
from fastapi import Request
from starlette.datastructures import URL
from starlette.exceptions import HTTPException as StarletteHTTPException

from tf_http_backend.middleware.errors import (
    ERROR_MAPPING,
    error_response,
    handle_http_exception,
    handle_state_error,
    status_for,
)
from tf_http_backend.state_store import (
    InconsistentStorageError,
    InvalidStateNameError,
    RequestBodyError,
    StateLockedError,
    StateNotFoundError,
    StateNotLockedError,
    StateStoreError,
    StorageError,
)


def _mock_request(correlation_id: str | None = None) -> MagicMock:
    request = MagicMock(spec=Request)
    request.url = URL("http://test/prod")
    request.method = "GET"
    request.state.correlation_id = correlation_id
    return request


@pytest.mark.parametrize(
    "exc,status_code",
    [
        (InvalidStateNameError("bad"), 400),
        (RequestBodyError("bad"), 400),
        (StateNotFoundError("gone"), 404),
        (StateNotLockedError("free"), 409),
        (StateLockedError("held"), 423),
        (StorageError("io"), 500),
        (InconsistentStorageError("dup"), 500),
        (StateStoreError("base"), 500),
        (RuntimeError("other"), 500),
    ],
)
def test_status_for(exc: Exception, status_code: int) -> None:
    assert status_for(exc) == status_code


def test_mapping_covers_client_errors() -> None:
    assert set(ERROR_MAPPING.values()) == {400, 404, 409, 423, 500}


def test_error_response_is_plain_text() -> None:
    response = error_response(423, correlation_id="test-123")

    assert response.status_code == 423
    assert response.body == b"Locked"
    assert response.media_type == "text/plain"
    assert response.headers["X-Request-ID"] == "test-123"


@pytest.mark.asyncio
async def test_handle_state_error_hides_message() -> None:
    exc = StorageError("failed to read /var/lib/terraform/prod.tfstate", name="prod")

    response = await handle_state_error(_mock_request("test-abc"), exc)

    assert response.status_code == 500
    assert response.body == b"Internal Server Error"
    assert response.headers["X-Request-ID"] == "test-abc"


@pytest.mark.asyncio
async def test_handle_state_error_without_correlation_id() -> None:
    response = await handle_state_error(_mock_request(), StateNotFoundError("gone"))

    assert response.status_code == 404
    assert "X-Request-ID" not in response.headers


@pytest.mark.asyncio
async def test_handle_http_exception_keeps_headers() -> None:
    exc = StarletteHTTPException(status_code=405, headers={"Allow": "GET"})

    response = await handle_http_exception(_mock_request(), exc)

    assert response.status_code == 405
    assert response.body == b"Method Not Allowed"
    assert response.headers["Allow"] == "GET"
