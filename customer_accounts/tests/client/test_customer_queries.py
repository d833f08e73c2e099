"""Tests for CustomerQueries cache wiring."""

import uuid

import httpx
import pytest

from customer_accounts.client import ApiError, CustomerApiClient, CustomerQueries, QueryCache, customer_keys


@pytest.fixture
def queries(override_db):
    api = CustomerApiClient(base_url="http://testserver", transport=httpx.ASGITransport(app=override_db))
    return CustomerQueries(api, QueryCache(stale_time=300.0, retry=1))


def test_key_hierarchy():
    assert customer_keys.all == ("customers",)
    assert customer_keys.lists() == ("customers", "list")
    assert customer_keys.list("active") == ("customers", "list", "active")
    assert customer_keys.details() == ("customers", "detail")
    assert customer_keys.detail("abc") == ("customers", "detail", "abc")


def test_detail_key_is_canonical():
    account_id = uuid.uuid4()
    expected = ("customers", "detail", str(account_id))
    assert customer_keys.detail(str(account_id).upper()) == expected
    assert customer_keys.detail(account_id.hex) == expected
    assert customer_keys.detail(account_id) == expected
    assert customer_keys.detail("not-a-uuid") == ("customers", "detail", "not-a-uuid")


@pytest.mark.asyncio
async def test_update_invalidates_detail_fetched_by_any_spelling(queries, test_customer):
    upper_id = str(test_customer.account_id).upper()
    await queries.get_customer(upper_id)

    await queries.update_customer(upper_id, {"first_name": "Janet"})

    assert queries.cache.is_stale(customer_keys.detail(upper_id))
    assert (await queries.get_customer(upper_id)).first_name == "Janet"
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_list_is_cached(queries, test_customer):
    first = await queries.list_customers()
    second = await queries.list_customers()
    assert first is second
    assert queries.cache.get_state(customer_keys.lists()).fetch_count == 1
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_create_invalidates_lists_only(queries, test_customer, customer_payload):
    account_id = str(test_customer.account_id)
    await queries.list_customers()
    await queries.get_customer(account_id)

    await queries.create_customer(customer_payload)

    assert queries.cache.is_stale(customer_keys.lists())
    assert not queries.cache.is_stale(customer_keys.detail(account_id))
    assert len(await queries.list_customers()) == 2
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_update_invalidates_lists_and_detail(queries, test_customer):
    account_id = str(test_customer.account_id)
    await queries.list_customers()
    await queries.get_customer(account_id)

    await queries.update_customer(account_id, {"first_name": "Janet"})

    assert queries.cache.is_stale(customer_keys.lists())
    assert queries.cache.is_stale(customer_keys.detail(account_id))
    assert (await queries.get_customer(account_id)).first_name == "Janet"
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_delete_invalidates_lists(queries, test_customer):
    account_id = str(test_customer.account_id)
    await queries.list_customers()

    await queries.delete_customer(account_id)

    assert queries.cache.is_stale(customer_keys.lists())
    assert await queries.list_customers() == []
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_failed_write_leaves_cache_untouched(queries, test_customer, customer_payload):
    await queries.list_customers()

    customer_payload["email"] = test_customer.email
    with pytest.raises(ApiError):
        await queries.create_customer(customer_payload)

    assert not queries.cache.is_stale(customer_keys.lists())
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_get_customer_requires_id(queries):
    with pytest.raises(ValueError, match="Customer ID is required"):
        await queries.get_customer("")
    await queries.api.aclose()


@pytest.mark.asyncio
async def test_failed_write_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request.method)
        raise httpx.ConnectError("down", request=request)

    api = CustomerApiClient(base_url="http://testserver", transport=httpx.MockTransport(handler))
    queries = CustomerQueries(api, QueryCache(stale_time=300.0, retry=1))
    async with api:
        with pytest.raises(ApiError):
            await queries.create_customer({"first_name": "A", "last_name": "B", "email": "a@example.com"})
        with pytest.raises(ApiError):
            await queries.list_customers()

    assert calls == ["POST", "GET", "GET"]
