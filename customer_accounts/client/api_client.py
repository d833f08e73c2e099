"""HTTP client for the customer API."""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from customer_accounts.core.config import settings
from customer_accounts.core.logging import get_logger
from customer_accounts.schemas.customer import CustomerResponse

logger = get_logger(__name__)

CustomerRecord = CustomerResponse

NETWORK_ERROR = "NETWORK_ERROR"
UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ApiError(Exception):
    """Failure reported by (or while reaching) the customer API."""

    def __init__(self, code: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ApiError(code={self.code!r}, status_code={self.status_code!r})"

    @classmethod
    def network(cls) -> "ApiError":
        return cls(NETWORK_ERROR, "Network error. Please check your connection.")

    @classmethod
    def unknown(cls, status_code: int | None = None) -> "ApiError":
        return cls(UNKNOWN_ERROR, "An unexpected error occurred", status_code)


class CustomerApiClient:
    """Typed async client returning unwrapped envelope data.

    Args:
        base_url: API root; defaults to ``settings.api_base_url``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (in-process ASGI app, mocks).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        api_prefix: str | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.prefix = api_prefix if api_prefix is not None else settings.api_prefix
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=timeout if timeout is not None else settings.client_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CustomerApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------

    async def list_customers(self) -> list[CustomerRecord]:
        body = await self._request("GET", "/customers")
        return [CustomerRecord.model_validate(item) for item in body["data"]]

    async def get_customer(self, account_id: str) -> CustomerRecord:
        body = await self._request("GET", f"/customers/{account_id}")
        return CustomerRecord.model_validate(body["data"])

    async def create_customer(self, data: Mapping[str, Any]) -> CustomerRecord:
        body = await self._request("POST", "/customers", json=dict(data))
        return CustomerRecord.model_validate(body["data"])

    async def update_customer(self, account_id: str, data: Mapping[str, Any]) -> CustomerRecord:
        body = await self._request("PUT", f"/customers/{account_id}", json=dict(data))
        return CustomerRecord.model_validate(body["data"])

    async def delete_customer(self, account_id: str) -> None:
        await self._request("DELETE", f"/customers/{account_id}")

    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, json: Any = None) -> dict[str, Any]:
        url = f"{self.prefix}{path}"
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.RequestError as exc:
            logger.warning("Customer API unreachable: %s %s (%s)", method, url, exc)
            raise ApiError.network() from exc

        if response.is_error:
            raise self._error_from(response)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError.unknown(response.status_code) from exc

    @staticmethod
    def _error_from(response: httpx.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            return ApiError.unknown(response.status_code)
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict) or "code" not in error:
            return ApiError.unknown(response.status_code)
        return ApiError(
            code=str(error["code"]),
            message=str(error.get("message", "")),
            status_code=response.status_code,
        )
