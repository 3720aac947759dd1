# ordering_client/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from ordering_client.flows.checkout_flow import CheckoutComposer
from ordering_client.flows.search_flow import SearchState
from ordering_client.models.restaurant_form import restaurant_to_form
from ordering_client.models.service_models import MenuItem, Restaurant
from ordering_client.observability.logging_loki import loki
from ordering_client.services import checkout_service, restaurant_service, search_service
from ordering_client.services.base import ServiceContext
from ordering_client.session.session_manager import ClientSession, get_session

load_dotenv()


# ------------------------------------------------------
#  Request bodies
# ------------------------------------------------------

class SearchQueryBody(BaseModel):
    searchQuery: str


class CuisinesBody(BaseModel):
    selectedCuisines: List[str]


class SortBody(BaseModel):
    sortOption: str


class PageBody(BaseModel):
    page: int


class OrderStatusBody(BaseModel):
    status: str


# ------------------------------------------------------
#  Session + credentials
# ------------------------------------------------------

def client_session(
    x_session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    authorization: Optional[str] = Header(default=None),
    x_trace_id: Optional[str] = Header(default=None, alias="X-Trace-Id"),
) -> ClientSession:
    """
    One ClientSession per X-Session-Id. The bearer token comes from the
    identity provider on the client side and is forwarded untouched.
    """
    session_id = (x_session_id or "").strip()
    if not session_id:
        raise HTTPException(status_code=400, detail="X-Session-Id header is required")
    session = get_session(session_id)
    session.request_count += 1
    session.last_active_at = datetime.now(timezone.utc)

    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    session.context = ServiceContext(access_token=token, session_id=session_id, trace_id=x_trace_id)
    return session


def _with_notifications(session: ClientSession, body: Dict[str, Any]) -> Dict[str, Any]:
    body["notifications"] = [n.model_dump(mode="json") for n in session.notifier.drain()]
    return body


def _cart_body(session: ClientSession, restaurant_id: str) -> Dict[str, Any]:
    items = session.cart_store.get_cart(restaurant_id)
    return _with_notifications(
        session,
        {"restaurantId": restaurant_id, "cartItems": [item.to_wire() for item in items]},
    )


async def _load_restaurant(session: ClientSession, restaurant_id: str) -> Optional[Restaurant]:
    result = await restaurant_service.get_restaurant(session.context, restaurant_id)
    if not result.success:
        session.notifier.error("Failed to get restaurant")
        return None
    return result.data


# ------------------------------------------------------
#  FastAPI App
# ------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await loki.flush()


app = FastAPI(title="Ordering Client: cart, search, checkout and order tracking", lifespan=lifespan)


@app.get("/health")
def health_check():
    loki.log(
        "info",
        {"event_type": "health"},
        service_type="ordering_client",
        sync_mode="sync",
        io="none",
    )
    return {"status": "ok", "service": "ordering_client"}


@app.get("/restaurants/{restaurant_id}")
async def get_restaurant(restaurant_id: str, session: ClientSession = Depends(client_session)):
    restaurant = await _load_restaurant(session, restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=502, detail="Failed to get restaurant")
    return _with_notifications(session, {"restaurant": restaurant.to_wire()})


# ------------------------------------------------------
#  Cart
# ------------------------------------------------------

@app.get("/restaurants/{restaurant_id}/cart")
def get_cart(restaurant_id: str, session: ClientSession = Depends(client_session)):
    return _cart_body(session, restaurant_id)


@app.post("/restaurants/{restaurant_id}/cart/items")
def add_cart_item(restaurant_id: str, menu_item: MenuItem, session: ClientSession = Depends(client_session)):
    session.cart_store.add_item(restaurant_id, menu_item)
    return _cart_body(session, restaurant_id)


@app.delete("/restaurants/{restaurant_id}/cart/items/{item_id}")
def remove_cart_item(restaurant_id: str, item_id: str, session: ClientSession = Depends(client_session)):
    session.cart_store.remove_item(restaurant_id, item_id)
    return _cart_body(session, restaurant_id)


@app.post("/restaurants/{restaurant_id}/checkout")
async def checkout(
    restaurant_id: str,
    delivery_details: Dict[str, Any],
    session: ClientSession = Depends(client_session),
):
    cart_items = session.cart_store.get_cart(restaurant_id)
    if not cart_items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    restaurant = await _load_restaurant(session, restaurant_id)
    redirect: Dict[str, str] = {}
    composer = CheckoutComposer(
        create_session=lambda request: checkout_service.create_checkout_session(session.context, request),
        navigate=lambda url: redirect.update(url=url),
        notifier=session.notifier,
        session_id=session.session_id,
    )
    await composer.checkout(cart_items, delivery_details, restaurant)

    if "url" in redirect:
        return RedirectResponse(redirect["url"], status_code=303)
    return _with_notifications(session, {"url": None})


# ------------------------------------------------------
#  Search
# ------------------------------------------------------

async def _search(session: ClientSession, city: str, state: SearchState) -> Dict[str, Any]:
    result = await search_service.search_restaurants(session.context, city, state)
    body: Dict[str, Any] = {"searchState": state.model_dump(), "data": [], "pagination": None}
    if result.success:
        body["data"] = [r.to_wire() for r in result.data.data]
        body["pagination"] = result.data.pagination.model_dump()
    else:
        session.notifier.error("Failed to get restaurants")
    return _with_notifications(session, body)


@app.get("/search/{city}")
async def search(city: str, session: ClientSession = Depends(client_session)):
    return await _search(session, city, session.enter_search(city).state)


@app.post("/search/{city}/query")
async def search_set_query(city: str, body: SearchQueryBody, session: ClientSession = Depends(client_session)):
    return await _search(session, city, session.enter_search(city).set_query(body.searchQuery))


@app.post("/search/{city}/query/reset")
async def search_reset_query(city: str, session: ClientSession = Depends(client_session)):
    return await _search(session, city, session.enter_search(city).reset_query())


@app.post("/search/{city}/cuisines")
async def search_set_cuisines(city: str, body: CuisinesBody, session: ClientSession = Depends(client_session)):
    return await _search(session, city, session.enter_search(city).set_cuisines(body.selectedCuisines))


@app.post("/search/{city}/sort")
async def search_set_sort(city: str, body: SortBody, session: ClientSession = Depends(client_session)):
    return await _search(session, city, session.enter_search(city).set_sort(body.sortOption))


@app.post("/search/{city}/page")
async def search_set_page(city: str, body: PageBody, session: ClientSession = Depends(client_session)):
    if body.page < 1:
        raise HTTPException(status_code=422, detail="page must be >= 1")
    return await _search(session, city, session.enter_search(city).set_page(body.page))


# ------------------------------------------------------
#  Restaurant operator: orders + restaurant
# ------------------------------------------------------

@app.get("/my/restaurant/orders")
async def list_orders(session: ClientSession = Depends(client_session)):
    orders = await session.get_order_tracker().list_orders()
    return _with_notifications(session, {"orders": [o.to_wire() for o in orders]})


@app.patch("/my/restaurant/orders/{order_id}/status")
async def update_order_status(order_id: str, body: OrderStatusBody, session: ClientSession = Depends(client_session)):
    tracker = session.get_order_tracker()
    accepted = await tracker.update_status(order_id, body.status)
    return _with_notifications(
        session,
        {"orderId": order_id, "accepted": accepted, "orders": [o.to_wire() for o in tracker.orders]},
    )


@app.get("/my/restaurant")
async def get_my_restaurant(session: ClientSession = Depends(client_session)):
    restaurant = await session.get_restaurant_manager().load()
    body: Dict[str, Any] = {"restaurant": None, "form": None}
    if restaurant is not None:
        body["restaurant"] = restaurant.to_wire()
        body["form"] = restaurant_to_form(restaurant).model_dump(mode="json", exclude={"image_file"})
    return _with_notifications(session, body)


@app.post("/my/restaurant")
@app.put("/my/restaurant")
async def save_my_restaurant(form: Dict[str, Any], session: ClientSession = Depends(client_session)):
    manager = session.get_restaurant_manager()
    if manager.restaurant is None:
        await manager.load()
    restaurant = await manager.save(form)
    return _with_notifications(
        session,
        {"restaurant": restaurant.to_wire() if restaurant is not None else None},
    )
