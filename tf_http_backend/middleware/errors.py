"""Error handling middleware and exception handlers."""

from http import HTTPStatus

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_423_LOCKED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from starlette.types import ASGIApp

from tf_http_backend.core.logging import get_logger, get_request_logger
from tf_http_backend.state_store.exceptions import (
    InvalidStateNameError,
    RequestBodyError,
    StateLockedError,
    StateNotFoundError,
    StateNotLockedError,
    StateStoreError,
    StorageError,
)

logger = get_logger()

# Map exception types to status codes; the most specific class wins
ErrorMapping = dict[type[Exception], int]

ERROR_MAPPING: ErrorMapping = {
    InvalidStateNameError: HTTP_400_BAD_REQUEST,
    RequestBodyError: HTTP_400_BAD_REQUEST,
    StateNotFoundError: HTTP_404_NOT_FOUND,
    StateNotLockedError: HTTP_409_CONFLICT,
    StateLockedError: HTTP_423_LOCKED,
    StorageError: HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: Exception, mapping: ErrorMapping = ERROR_MAPPING) -> int:
    """Resolve the HTTP status code for an exception."""
    for cls in type(exc).__mro__:
        if cls in mapping:
            return mapping[cls]
    return HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int,
    correlation_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> PlainTextResponse:
    """Create a plain-text error response carrying only the status phrase."""
    response = PlainTextResponse(
        HTTPStatus(status_code).phrase, status_code=status_code, headers=headers
    )
    if correlation_id:
        response.headers["X-Request-ID"] = correlation_id
    return response


def _correlation_id(request: Request) -> str | None:
    correlation_id = getattr(request.state, "correlation_id", None)
    return str(correlation_id) if correlation_id is not None else None


async def handle_state_error(request: Request, exc: Exception) -> Response:
    """Convert a state store error into its HTTP response.

    Client errors are logged as warnings. Server errors are logged with the
    underlying cause, which never reaches the response body.
    """
    status_code = status_for(exc)
    correlation_id = _correlation_id(request)
    log = get_request_logger(correlation_id)

    context = {
        "error_type": exc.__class__.__name__,
        "status_code": status_code,
        "method": request.method,
        "path": request.url.path,
        "name": getattr(exc, "name", None),
    }
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        cause = exc.__cause__ or exc
        log.error("request_error", error_message=str(exc), cause=repr(cause), **context)
    else:
        log.warning("request_rejected", error_message=str(exc), **context)

    return error_response(status_code, correlation_id)


async def handle_http_exception(request: Request, exc: Exception) -> Response:
    """Render routing errors (unknown path, method not allowed) as plain text."""
    if not isinstance(exc, StarletteHTTPException):
        return await handle_state_error(request, exc)

    correlation_id = _correlation_id(request)
    get_request_logger(correlation_id).warning(
        "unknown_route" if exc.status_code != 405 else "unknown_method",
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
    )
    return error_response(
        exc.status_code, correlation_id, headers=getattr(exc, "headers", None)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the state error and routing error handlers on ``app``."""
    app.add_exception_handler(StateStoreError, handle_state_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware turning unexpected exceptions into a generic 500 response."""

    def __init__(self, app: ASGIApp) -> None:
        """
        Initialize middleware.

        Args:
        ----
            app: The ASGI application
        """
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and handle errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except Exception as exc:
            correlation_id = _correlation_id(request)
            logger.exception(
                "unhandled_request_error",
                error_type=exc.__class__.__name__,
                method=request.method,
                path=request.url.path,
                correlation_id=correlation_id,
            )
            return error_response(HTTP_500_INTERNAL_SERVER_ERROR, correlation_id)
