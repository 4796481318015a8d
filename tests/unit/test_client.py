import pytest

from shop_by_specs.errors import (
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    ShopifyError,
    TransientNetworkError,
    UpstreamValidationError,
)
from shop_by_specs.shopify.client import ShopifyClient, parse_next_link, raise_for_status
from shop_by_specs.shopify.rate_limiter import RateLimiter


def test_parse_next_link_picks_next_relation():
    header = (
        '<https://s.myshopify.com/admin/api/2024-07/smart_collections.json?limit=250&page_info=abc>; rel="previous", '
        '<https://s.myshopify.com/admin/api/2024-07/smart_collections.json?limit=250&page_info=def>; rel="next"'
    )

    assert parse_next_link(header).endswith("page_info=def")
    assert parse_next_link(None) is None
    assert parse_next_link('<https://s.myshopify.com/x>; rel="previous"') is None


def test_success_status_passes():
    raise_for_status("GET", "smart_collections.json", 200, "{}")


def test_rate_limit_carries_retry_after():
    with pytest.raises(RateLimitedError) as exc:
        raise_for_status("GET", "smart_collections.json", 429, "", retry_after="2.0")
    assert exc.value.retry_after == 2.0


@pytest.mark.parametrize(
    "status, error",
    [
        (500, TransientNetworkError),
        (503, TransientNetworkError),
        (404, NotFoundError),
        (401, ShopifyError),
    ],
)
def test_status_mapping(status, error):
    with pytest.raises(error):
        raise_for_status("GET", "smart_collections.json", status, "oops")


def test_validation_error_keeps_upstream_errors():
    with pytest.raises(UpstreamValidationError) as exc:
        raise_for_status("POST", "smart_collections.json", 422, '{"errors": {"handle": ["has already been taken"]}}')
    assert exc.value.errors == {"handle": ["has already been taken"]}


def make_client(responses):
    async def no_sleep(_seconds):
        return None

    client = ShopifyClient(
        store_url="test-store.myshopify.com",
        access_token="token",
        api_version="2024-07",
        rate_limiter=RateLimiter(min_interval=0, sleep=no_sleep),
    )
    sent = []

    async def fake_send(method, endpoint, params=None, payload=None):
        sent.append((method, endpoint, payload))
        return responses.pop(0), {}

    client._send = fake_send
    return client, sent


def test_base_url():
    client, _ = make_client([])

    assert client.base_url == "https://test-store.myshopify.com/admin/api/2024-07"
    assert client._url("smart_collections.json") == f"{client.base_url}/smart_collections.json"
    assert client._url("https://elsewhere/next") == "https://elsewhere/next"


@pytest.mark.asyncio
async def test_graphql_retries_throttled_queries():
    throttled = {"errors": [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]}
    client, sent = make_client([throttled, {"data": {"shop": {"name": "Test"}}}])

    data = await client.graphql("{ shop { name } }")

    assert data == {"shop": {"name": "Test"}}
    assert len(sent) == 2
    assert sent[0][1] == "graphql.json"


@pytest.mark.asyncio
async def test_graphql_without_data_is_malformed():
    client, _ = make_client([{"errors": [{"message": "Field 'nope' doesn't exist"}]}])

    with pytest.raises(MalformedResponseError):
        await client.graphql("{ nope }")
