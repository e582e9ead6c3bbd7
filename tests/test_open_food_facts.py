import httpx
import pytest

from allertify.core.exceptions import (
    ProductNotFoundException,
    UpstreamServiceException,
    UpstreamTimeoutException,
)
from allertify.infrastructure.open_food_facts import OpenFoodFactsClient

BASE_URL = "https://off.test/api/v2"


def _client(handler) -> OpenFoodFactsClient:
    return OpenFoodFactsClient(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


async def test_found_product_is_parsed():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "status": 1,
                "product": {
                    "product_name": "Choco Wafer",
                    "brands": "Tango",
                    "ingredients_text": "wheat flour, milk powder",
                    "nutriments": {"nutrition-score-fr": 18},
                },
            },
        )

    product = await _client(handler).get_product("8992761111111")

    assert product.product_name == "Choco Wafer"
    assert product.nutritional_score == "18"
    assert requests[0].url.path == "/api/v2/product/8992761111111.json"
    assert requests[0].headers["user-agent"].startswith("Allertify/")


async def test_http_404_is_not_found():
    client = _client(lambda request: httpx.Response(404))
    with pytest.raises(ProductNotFoundException):
        await client.get_product("8992761111111")


async def test_status_zero_is_not_found():
    client = _client(lambda request: httpx.Response(200, json={"status": 0, "status_verbose": "product not found"}))
    with pytest.raises(ProductNotFoundException):
        await client.get_product("8992761111111")


async def test_timeout_is_reported_as_upstream_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamTimeoutException):
        await _client(handler).get_product("8992761111111")


async def test_server_error_is_upstream_failure():
    client = _client(lambda request: httpx.Response(503))
    with pytest.raises(UpstreamServiceException, match="503"):
        await client.get_product("8992761111111")


async def test_invalid_json_is_upstream_failure():
    client = _client(lambda request: httpx.Response(200, content=b"<html>maintenance</html>"))
    with pytest.raises(UpstreamServiceException):
        await client.get_product("8992761111111")


async def test_null_nutriments_are_treated_as_empty():
    client = _client(
        lambda request: httpx.Response(
            200, json={"status": 1, "product": {"product_name": "Plain Crackers", "nutriments": None}}
        )
    )
    product = await client.get_product("8992761111111")

    assert product.product_name == "Plain Crackers"
    assert product.nutritional_score == "N/A"


async def test_malformed_product_is_upstream_failure():
    client = _client(
        lambda request: httpx.Response(
            200, json={"status": 1, "product": {"product_name": {"en": "Crackers"}, "nutriments": []}}
        )
    )
    with pytest.raises(UpstreamServiceException, match="malformed product"):
        await client.get_product("8992761111111")
