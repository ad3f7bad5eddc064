"""Correlation ID middleware for request tracking."""

import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars, clear_contextvars

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle request correlation IDs.

    Terraform does not send a request ID, but proxies in front of the backend
    often do. A valid incoming ``X-Request-ID`` is reused, otherwise a UUID is
    generated. The ID is added to:
    - Request state
    - Response headers
    - Structured logging context
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    def _validate_correlation_id(self, value: str | None) -> bool:
        """
        Validate if a string can be used as a correlation ID.

        Accepts UUIDs and short printable tokens without whitespace.
        """
        if not value or len(value) > MAX_REQUEST_ID_LENGTH:
            return False

        try:
            uuid.UUID(value)
            return True
        except ValueError:
            return value.isprintable() and not any(c.isspace() for c in value)

    def _get_correlation_id(self, request: Request) -> str:
        header_value = request.headers.get(REQUEST_ID_HEADER, "")
        if self._validate_correlation_id(header_value):
            return header_value

        return str(uuid.uuid4())

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers
        """
        clear_contextvars()

        correlation_id = self._get_correlation_id(request)
        bind_contextvars(correlation_id=correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = correlation_id

        return response
