"""Tests for the product/stock API client and repositories"""
import httpx
import pytest
from decimal import Decimal

from cartsync.errors import NetworkError, NotFoundError
from cartsync.services.api import ApiClient
from cartsync.services.repositories import ProductRepository, StockRepository


def make_client(handler, retries=3):
    return ApiClient(
        "http://catalog.test",
        timeout=1.0,
        retries=retries,
        backoff=0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_product():
    """Product record is parsed, extra attributes kept"""
    def handler(request):
        assert request.url.path == "/products/1"
        return httpx.Response(200, json={
            "id": 1,
            "title": "Running Shoe",
            "price": 179.9,
            "image": "https://img.test/1.jpg",
            "brand": "Acme",
        })

    client = make_client(handler)
    product = await ProductRepository(client).get_product(1)
    await client.aclose()

    assert product.id == 1
    assert product.price == Decimal("179.9")
    assert product.model_extra == {"brand": "Acme"}


@pytest.mark.asyncio
async def test_get_stock():
    """Stock record is parsed"""
    client = make_client(lambda request: httpx.Response(200, json={"id": 2, "amount": 4}))

    stock = await StockRepository(client).get_stock(2)
    await client.aclose()

    assert stock.amount == 4


@pytest.mark.asyncio
async def test_get_stock_without_amount():
    """Missing amount is kept as None for the cart store to decide"""
    client = make_client(lambda request: httpx.Response(200, json={"id": 2}))

    stock = await StockRepository(client).get_stock(2)
    await client.aclose()

    assert stock.amount is None


@pytest.mark.asyncio
async def test_not_found():
    """404 maps to NotFoundError"""
    client = make_client(lambda request: httpx.Response(404, json={}))

    with pytest.raises(NotFoundError) as exc_info:
        await ProductRepository(client).get_product(9)
    await client.aclose()

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_server_error_is_not_retried():
    """5xx maps to NetworkError without retry"""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, text="maintenance")

    client = make_client(handler)
    with pytest.raises(NetworkError) as exc_info:
        await StockRepository(client).get_stock(1)
    await client.aclose()

    assert exc_info.value.status_code == 503
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transport_error_is_retried():
    """Connection errors are retried until a response arrives"""
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"id": 1, "amount": 5})

    client = make_client(handler, retries=3)
    stock = await StockRepository(client).get_stock(1)
    await client.aclose()

    assert stock.amount == 5
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_transport_error_exhausts_retries():
    """Persistent connection errors become NetworkError"""
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, retries=2)
    with pytest.raises(NetworkError):
        await StockRepository(client).get_stock(1)
    await client.aclose()

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_timeout_is_network_error():
    """Timeouts become NetworkError"""
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler, retries=1)
    with pytest.raises(NetworkError):
        await ProductRepository(client).get_product(1)
    await client.aclose()


@pytest.mark.asyncio
async def test_invalid_json():
    """Non-JSON body is malformed data"""
    client = make_client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(NetworkError):
        await ProductRepository(client).get_product(1)
    await client.aclose()


@pytest.mark.asyncio
async def test_malformed_record():
    """Record without required fields is malformed data"""
    client = make_client(lambda request: httpx.Response(200, json={"id": 1, "price": 10}))

    with pytest.raises(NetworkError):
        await ProductRepository(client).get_product(1)
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["abc", None, "NaN", True])
async def test_product_with_bad_price(price):
    """A price that is not a finite number is malformed data, never a free product"""
    client = make_client(lambda request: httpx.Response(200, json={"id": 1, "title": "Running Shoe", "price": price}))

    with pytest.raises(NetworkError):
        await ProductRepository(client).get_product(1)
    await client.aclose()


@pytest.mark.asyncio
async def test_product_without_price():
    client = make_client(lambda request: httpx.Response(200, json={"id": 1, "title": "Running Shoe"}))

    with pytest.raises(NetworkError):
        await ProductRepository(client).get_product(1)
    await client.aclose()


@pytest.mark.asyncio
async def test_non_object_payload():
    """A list where a record is expected is malformed data"""
    client = make_client(lambda request: httpx.Response(200, json=[{"id": 1, "amount": 2}]))

    with pytest.raises(NetworkError):
        await StockRepository(client).get_stock(1)
    await client.aclose()


def test_from_settings(monkeypatch):
    """Client reads URL, timeout and retries from the environment"""
    monkeypatch.setenv("CART_API_URL", "http://shop.test/api/")
    monkeypatch.setenv("CART_API_TIMEOUT", "2.5")
    monkeypatch.setenv("CART_API_RETRIES", "5")

    client = ApiClient.from_settings()

    assert client.base_url == "http://shop.test/api"
    assert client.timeout == 2.5
    assert client.retries == 5
