"""Customer queries and mutations backed by the query cache."""

from __future__ import annotations

import uuid
from typing import Any, Mapping

from customer_accounts.core.logging import get_logger

from .api_client import CustomerApiClient, CustomerRecord
from .query_cache import QueryCache, QueryKey

logger = get_logger(__name__)


class CustomerKeys:
    """Hierarchical query keys for customer data."""

    all: QueryKey = ("customers",)

    def lists(self) -> QueryKey:
        return (*self.all, "list")

    def list(self, filters: str) -> QueryKey:
        return (*self.lists(), filters)

    def details(self) -> QueryKey:
        return (*self.all, "detail")

    def detail(self, account_id: str) -> QueryKey:
        """Detail key; UUIDs are canonicalized so any spelling maps to one entry."""
        try:
            key = str(uuid.UUID(str(account_id)))
        except ValueError:
            key = str(account_id)
        return (*self.details(), key)


customer_keys = CustomerKeys()


class CustomerQueries:
    """Reads and writes customer data for one portal session.

    Reads are served through the cache. Writes go straight to the API, never
    retry and never touch cached data until the server confirms; on success
    the affected keys are invalidated so the next read fetches fresh data.
    """

    def __init__(self, api: CustomerApiClient, cache: QueryCache | None = None) -> None:
        self.api = api
        self.cache = cache or QueryCache()

    async def list_customers(self) -> list[CustomerRecord]:
        return await self.cache.fetch(customer_keys.lists(), self.api.list_customers)

    async def get_customer(self, account_id: str | None) -> CustomerRecord:
        if not account_id:
            raise ValueError("Customer ID is required")
        return await self.cache.fetch(
            customer_keys.detail(account_id),
            lambda: self.api.get_customer(account_id),
        )

    async def create_customer(self, data: Mapping[str, Any]) -> CustomerRecord:
        customer = await self.api.create_customer(data)
        self.cache.invalidate(customer_keys.lists())
        logger.debug("Created customer %s; list invalidated", customer.account_id)
        return customer

    async def update_customer(self, account_id: str, data: Mapping[str, Any]) -> CustomerRecord:
        customer = await self.api.update_customer(account_id, data)
        self.cache.invalidate(customer_keys.lists())
        self.cache.invalidate(customer_keys.detail(str(customer.account_id)))
        return customer

    async def delete_customer(self, account_id: str) -> None:
        await self.api.delete_customer(account_id)
        self.cache.invalidate(customer_keys.lists())
