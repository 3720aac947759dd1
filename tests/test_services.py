from __future__ import annotations

import json
from decimal import Decimal

import httpx
import pytest

from ordering_client.flows.search_flow import SearchState
from ordering_client.models.restaurant_form import MenuItemForm, RestaurantForm
from ordering_client.models.service_models import (
    CheckoutCartItem,
    CheckoutSessionRequest,
    DeliveryDetails,
    Order,
    Restaurant,
)
from ordering_client.services import checkout_service, order_service, restaurant_service, search_service
from ordering_client.services.base import ServiceContext


BASE_URL = "http://api.test"


class Recorder:
    """MockTransport handler that remembers requests and replays canned responses."""

    def __init__(self, status_code=200, payload=None, content=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def ctx():
    return ServiceContext(access_token="tok-123", session_id="s1", trace_id="t-1")


@pytest.mark.asyncio
async def test_get_restaurant_sends_bearer_token(ctx, restaurant_payload, loki_events):
    recorder = Recorder(payload=restaurant_payload)
    async with recorder.client() as client:
        result = await restaurant_service.get_restaurant(ctx, "r1", client=client, base_url=BASE_URL)

    assert result.success
    assert isinstance(result.data, Restaurant)
    assert result.data.delivery_price == 299
    (request,) = recorder.requests
    assert request.method == "GET"
    assert request.url.path == "/api/restaurant/r1"
    assert request.headers["Authorization"] == "Bearer tok-123"
    assert [e["event_type"] for e in loki_events] == ["service_call", "service_return"]


@pytest.mark.asyncio
async def test_search_sends_state_verbatim(ctx, restaurant_payload):
    recorder = Recorder(
        payload={"data": [restaurant_payload], "pagination": {"page": 2, "pages": 5, "total": 41}}
    )
    state = SearchState(query="pizza", page=2, selected_cuisines=["italian", "vegan"], sort_option="bestMatch")

    async with recorder.client() as client:
        result = await search_service.search_restaurants(ctx, "London", state, client=client, base_url=BASE_URL)

    assert result.success
    assert result.data.pagination.pages == 5
    assert [r.id for r in result.data.data] == ["r1"]
    (request,) = recorder.requests
    assert request.url.path == "/api/restaurant/search/London"
    assert dict(request.url.params) == {
        "searchQuery": "pizza",
        "selectedCuisines": "italian,vegan",
        "sortOption": "bestMatch",
        "page": "2",
    }


@pytest.mark.asyncio
async def test_search_without_city_is_not_sent(ctx):
    recorder = Recorder(payload={})
    async with recorder.client() as client:
        result = await search_service.search_restaurants(ctx, None, SearchState(), client=client, base_url=BASE_URL)

    assert not result.success
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_checkout_session_body_keeps_string_quantities(ctx, delivery_details):
    recorder = Recorder(payload={"url": "https://pay.example.com/s/1"})
    request = CheckoutSessionRequest(
        cart_items=[CheckoutCartItem(menu_item_id="m1", name="Burger", quantity="3")],
        restaurant_id="r1",
        delivery_details=DeliveryDetails.model_validate(delivery_details),
    )

    async with recorder.client() as client:
        result = await checkout_service.create_checkout_session(ctx, request, client=client, base_url=BASE_URL)

    assert result.success
    assert result.data.url == "https://pay.example.com/s/1"
    (sent,) = recorder.requests
    assert sent.method == "POST"
    assert json.loads(sent.content) == {
        "cartItems": [{"menuItemId": "m1", "name": "Burger", "quantity": "3"}],
        "restaurantId": "r1",
        "deliveryDetails": delivery_details,
    }


@pytest.mark.asyncio
async def test_orders_are_parsed(ctx):
    recorder = Recorder(
        payload=[
            {"_id": "o1", "status": "placed", "cartItems": [{"menuItemId": "m1", "name": "Burger", "quantity": "2"}]},
            {"_id": "o2", "status": "paid", "cartItems": []},
        ]
    )
    async with recorder.client() as client:
        result = await order_service.get_my_restaurant_orders(ctx, client=client, base_url=BASE_URL)

    assert result.success
    assert all(isinstance(o, Order) for o in result.data)
    assert [o.status for o in result.data] == ["placed", "paid"]
    assert recorder.requests[0].url.path == "/api/my/restaurant/order"


@pytest.mark.asyncio
async def test_update_order_status_patches_status(ctx):
    recorder = Recorder(payload={"_id": "o1", "status": "delivered"})
    async with recorder.client() as client:
        result = await order_service.update_order_status(ctx, "o1", "delivered", client=client, base_url=BASE_URL)

    assert result.success
    (request,) = recorder.requests
    assert request.method == "PATCH"
    assert request.url.path == "/api/my/restaurant/order/o1/status"
    assert json.loads(request.content) == {"status": "delivered"}


@pytest.mark.asyncio
async def test_update_order_status_accepts_an_empty_acknowledgement(ctx):
    recorder = Recorder(status_code=204, content=b"")
    async with recorder.client() as client:
        result = await order_service.update_order_status(ctx, "o1", "paid", client=client, base_url=BASE_URL)

    assert result.success
    assert result.data is None


@pytest.mark.asyncio
async def test_http_error_becomes_failed_result(ctx, loki_events):
    recorder = Recorder(status_code=500, payload={"message": "Something went wrong"})
    async with recorder.client() as client:
        result = await order_service.update_order_status(ctx, "o1", "paid", client=client, base_url=BASE_URL)

    assert not result.success
    assert result.status_code == 500
    assert loki_events[-1]["event_type"] == "service_error"
    assert loki_events[-1]["level"] == "error"


@pytest.mark.asyncio
async def test_unexpected_shape_becomes_failed_result(ctx):
    recorder = Recorder(payload={"not": "a list"})
    async with recorder.client() as client:
        result = await order_service.get_my_restaurant_orders(ctx, client=client, base_url=BASE_URL)

    assert not result.success
    assert result.status_code == 200


@pytest.mark.asyncio
async def test_transport_error_becomes_failed_result(ctx):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await restaurant_service.get_restaurant(ctx, "r1", client=client, base_url=BASE_URL)

    assert not result.success
    assert result.status_code is None
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_missing_base_url_is_logged_not_raised(ctx, monkeypatch, loki_events):
    monkeypatch.delenv("API_BASE_URL", raising=False)

    result = await order_service.get_my_restaurant_orders(ctx)

    assert not result.success
    assert [e["event_type"] for e in loki_events] == ["service_missing_config"]


@pytest.mark.asyncio
async def test_create_restaurant_sends_minor_unit_multipart(ctx, restaurant_payload):
    recorder = Recorder(payload=restaurant_payload)
    form = RestaurantForm(
        restaurant_name="Luigi's",
        city="London",
        country="United Kingdom",
        delivery_price=Decimal("2.99"),
        estimated_delivery_time=30,
        cuisines=["Italian"],
        menu_items=[MenuItemForm(name="Burger", price=Decimal("5"))],
        image_url="https://images.example.com/luigis.png",
    )

    async with recorder.client() as client:
        result = await restaurant_service.create_my_restaurant(ctx, form, client=client, base_url=BASE_URL)

    assert result.success
    (request,) = recorder.requests
    assert request.method == "POST"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    body = request.read()
    assert b'name="deliveryPrice"\r\n\r\n299\r\n' in body
    assert b'name="menuItems[0][price]"\r\n\r\n500\r\n' in body
    assert b'name="cuisines[0]"\r\n\r\nItalian\r\n' in body
    assert b'name="imageUrl"' in body


@pytest.mark.asyncio
async def test_update_restaurant_uploads_image_file(ctx, restaurant_payload):
    recorder = Recorder(payload=restaurant_payload)
    form = RestaurantForm(
        restaurant_name="Luigi's",
        city="London",
        country="United Kingdom",
        cuisines=["Italian"],
        menu_items=[MenuItemForm(name="Burger", price=Decimal("5"))],
        image_url="https://images.example.com/old.png",
        image_file=b"\x89PNG fake",
    )

    async with recorder.client() as client:
        result = await restaurant_service.update_my_restaurant(ctx, form, client=client, base_url=BASE_URL)

    assert result.success
    body = recorder.requests[0].read()
    assert recorder.requests[0].method == "PUT"
    assert b'name="imageFile"; filename="image"' in body
    assert b'name="imageUrl"' not in body
