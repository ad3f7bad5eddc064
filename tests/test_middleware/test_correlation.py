"""Correlation ID middleware tests."""

from typing import AsyncGenerator, cast
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient
from pytest import fixture, mark
from pytest_asyncio import fixture as asyncio_fixture
from starlette.types import ASGIApp

from tf_http_backend.middleware.correlation import CorrelationMiddleware


@fixture
def correlation_app() -> FastAPI:
    """Get test application with correlation ID middleware."""
    app = FastAPI()

    @app.get("/test")
    async def test_endpoint(request: Request) -> JSONResponse:
        return JSONResponse({"correlation_id": request.state.correlation_id})

    app.add_middleware(CorrelationMiddleware)
    return app


@asyncio_fixture
async def correlation_client(
    correlation_app: FastAPI,
) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=cast(ASGIApp, correlation_app))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@mark.asyncio
async def test_correlation_id_generation(correlation_client: AsyncClient) -> None:
    response = await correlation_client.get("/test")

    assert response.status_code == status.HTTP_200_OK
    correlation_id = response.headers["X-Request-ID"]
    assert UUID(correlation_id)
    assert response.json()["correlation_id"] == correlation_id


@mark.asyncio
async def test_correlation_id_propagation(correlation_client: AsyncClient) -> None:
    response = await correlation_client.get(
        "/test", headers={"X-Request-ID": "ci-run-42"}
    )

    assert response.headers["X-Request-ID"] == "ci-run-42"
    assert response.json()["correlation_id"] == "ci-run-42"


@mark.asyncio
@mark.parametrize("value", ["has space", "x" * 200])
async def test_invalid_correlation_id_is_replaced(
    correlation_client: AsyncClient, value: str
) -> None:
    response = await correlation_client.get("/test", headers={"X-Request-ID": value})

    assert response.headers["X-Request-ID"] != value
    assert UUID(response.headers["X-Request-ID"])


@mark.asyncio
async def test_error_responses_carry_request_id(
    test_app_async_client: AsyncClient,
) -> None:
    response = await test_app_async_client.get(
        "/missing", headers={"X-Request-ID": "test-404"}
    )

    assert response.status_code == 404
    assert response.headers["X-Request-ID"] == "test-404"
