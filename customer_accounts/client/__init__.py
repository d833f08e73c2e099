"""Client data layer: HTTP client, query cache and customer queries."""

from .api_client import ApiError, CustomerApiClient, CustomerRecord
from .customers import CustomerKeys, CustomerQueries, customer_keys
from .query_cache import QueryCache, QueryState

__all__ = [
    "ApiError",
    "CustomerApiClient",
    "CustomerKeys",
    "CustomerQueries",
    "CustomerRecord",
    "QueryCache",
    "QueryState",
    "customer_keys",
]
