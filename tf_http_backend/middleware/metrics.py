"""Request metrics middleware for Prometheus monitoring."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.routing import Route
from starlette.types import ASGIApp

from tf_http_backend.core.logging import get_logger
from tf_http_backend.core.metrics import (
    REQUEST_DURATION,
    REQUESTS_TOTAL,
    RESPONSES_TOTAL,
)

logger = get_logger()

UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    """Return the matched route template, keeping state names out of labels."""
    route = request.scope.get("route")
    if isinstance(route, Route):
        return route.path
    return UNMATCHED_ROUTE


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect request/response metrics.

    Records:
    - Total requests by method and route
    - Total responses by status code
    - Request duration histogram
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and record metrics.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers
        """
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = route_label(request)
        REQUESTS_TOTAL.labels(method=request.method, route=route).inc()
        REQUEST_DURATION.labels(method=request.method, route=route).observe(duration)
        RESPONSES_TOTAL.labels(status_code=str(response.status_code)).inc()

        logger.info(
            "request_processed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )

        return response
