"""Prometheus metrics for the Customer Account Management API.

Metrics are exposed at the /metrics endpoint.

Metrics Categories:
- HTTP request metrics (latency, count, in-flight)
- Customer operation metrics (create/update/delete outcomes)
"""

from prometheus_client import Counter, Gauge, Histogram, Info
from starlette.applications import Starlette
from starlette.routing import Match
from starlette.types import Scope

# Application info
APP_INFO = Info("customers_app", "Customer account management application information")

# HTTP Request metrics
HTTP_REQUESTS_TOTAL = Counter(
    "customers_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "customers_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "customers_http_requests_in_progress",
    "Number of HTTP requests currently in progress",
    ["method", "endpoint"],
)

# Customer operation metrics
CUSTOMER_OPERATIONS_TOTAL = Counter(
    "customers_operations_total",
    "Customer service operations by outcome",
    ["operation", "outcome"],  # outcome: success, not_found, conflict
)

def set_app_info(version: str, environment: str) -> None:
    """Set application info metric.

    Args:
        version: Application version string.
        environment: Deployment environment (development, staging, production).
    """
    APP_INFO.info({"version": version, "environment": environment})


UNMATCHED_ENDPOINT = "unmatched"


def endpoint_label(app: Starlette, scope: Scope) -> str:
    """Route template serving ``scope`` (e.g. ``/api/customers/{account_id}``).

    Requests that match no route share the ``unmatched`` label.
    """
    partial = None
    for route in app.router.routes:
        match, _ = route.matches(scope)
        if match == Match.FULL:
            return route.path
        if match == Match.PARTIAL and partial is None:
            partial = route.path
    return partial or UNMATCHED_ENDPOINT


def record_customer_operation(operation: str, outcome: str) -> None:
    """Record the outcome of a customer service operation.

    Args:
        operation: create, update or delete.
        outcome: success, not_found or conflict.
    """
    CUSTOMER_OPERATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()
