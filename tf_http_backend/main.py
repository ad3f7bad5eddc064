"""Main FastAPI application module."""

from fastapi import FastAPI

from tf_http_backend.api.router import router
from tf_http_backend.core.config import Settings
from tf_http_backend.middleware.correlation import CorrelationMiddleware
from tf_http_backend.middleware.errors import (
    ErrorHandlingMiddleware,
    register_exception_handlers,
)
from tf_http_backend.middleware.metrics import MetricsMiddleware
from tf_http_backend.middleware.security import SecurityHeadersMiddleware
from tf_http_backend.state_store import StateStore


def create_app(
    settings: Settings | None = None, store: StateStore | None = None
) -> FastAPI:
    """Build the backend application.

    Args:
        settings: Application settings, read from the environment if omitted
        store: State store to serve, created from ``settings.path`` if omitted

    Returns:
        Configured FastAPI application

    Raises:
        StorageInitError: If the storage root cannot be used
    """
    settings = settings or Settings()
    store = store or StateStore(storage_path=settings.path)

    # Every single-segment path is a state name, so the docs routes are off
    # and paths are never redirected
    app = FastAPI(
        title=settings.app_name,
        description="Terraform remote state backend over HTTP",
        version=settings.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.store = store

    # Add middleware in order (inside -> out):
    # 1. Security headers (outermost)
    # 2. Correlation (adds request ID)
    # 3. Metrics (tracks all requests)
    # 4. Error handling (innermost - handles unexpected errors)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)
    app.include_router(router)

    return app
