"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

REQUESTS_TOTAL = Counter(
    "tf_http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "route"],
)

RESPONSES_TOTAL = Counter(
    "tf_http_responses_total",
    "Total number of HTTP responses",
    labelnames=["status_code"],
)

REQUEST_DURATION = Histogram(
    "tf_http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["method", "route"],
)

STATE_OPERATIONS_TOTAL = Counter(
    "tf_http_state_operations_total",
    "Total number of state operations by outcome",
    labelnames=["operation", "outcome"],
)
