from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import urlparse

import pydantic

from ordering_client.errors import RequestError, ValidationError
from ordering_client.models.service_models import (
    CartItem,
    CheckoutCartItem,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    DeliveryDetails,
    Restaurant,
)
from ordering_client.notifications import Notifier
from ordering_client.observability.logging_loki import loki
from ordering_client.services.base import ServiceResult


CreateCheckoutSession = Callable[[CheckoutSessionRequest], Awaitable[ServiceResult]]
Navigate = Callable[[str], None]

SERVICE_TYPE = "checkout_flow"


def validate_delivery_details(details: Union[DeliveryDetails, Dict[str, Any]]) -> DeliveryDetails:
    if isinstance(details, DeliveryDetails):
        return details
    try:
        return DeliveryDetails.model_validate(details)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(f"Invalid delivery details: {first.get('msg')}", field=field)


def _usable_url(data: Any) -> Optional[str]:
    url = data.url if isinstance(data, CheckoutSessionResponse) else None
    if not url:
        return None
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return url


class CheckoutComposer:
    """
    Turns a cart plus a delivery profile into a checkout-session request and
    hands the browser over to the returned payment URL.

    The cart is read, never changed: clearing it after payment belongs to
    whatever observes the completed checkout.
    """

    def __init__(
        self,
        create_session: CreateCheckoutSession,
        navigate: Navigate,
        notifier: Notifier,
        session_id: Optional[str] = None,
    ) -> None:
        self.create_session = create_session
        self.navigate = navigate
        self.notifier = notifier
        self.session_id = session_id
        self.is_pending = False

    def compose(
        self,
        cart_items: List[CartItem],
        delivery_details: Union[DeliveryDetails, Dict[str, Any]],
        restaurant: Restaurant,
    ) -> CheckoutSessionRequest:
        if not cart_items:
            raise ValidationError("Cart is empty", field="cartItems")

        details = validate_delivery_details(delivery_details)

        return CheckoutSessionRequest(
            cart_items=[
                CheckoutCartItem(menu_item_id=item.id, name=item.name, quantity=str(item.quantity))
                for item in cart_items
            ],
            restaurant_id=restaurant.id,
            delivery_details=details,
        )

    async def checkout(
        self,
        cart_items: List[CartItem],
        delivery_details: Union[DeliveryDetails, Dict[str, Any]],
        restaurant: Optional[Restaurant],
    ) -> Optional[str]:
        """Returns the URL navigated to, or None when nothing was handed off."""
        if restaurant is None:
            return None

        try:
            request = self.compose(cart_items, delivery_details, restaurant)
        except ValidationError as e:
            self.notifier.error(str(e))
            return None

        start = time.perf_counter()
        self.is_pending = True
        try:
            result = await self.create_session(request)
        finally:
            self.is_pending = False

        try:
            if not result.success:
                raise RequestError(result.error or "checkout session failed", status_code=result.status_code)
            url = _usable_url(result.data)
            if url is None:
                raise RequestError("checkout session returned no redirect URL", status_code=result.status_code)
        except RequestError as e:
            loki.log(
                "error",
                {
                    "event_type": "checkout_failed",
                    "restaurant_id": restaurant.id,
                    "status_code": e.status_code,
                    "error": str(e),
                    "session_id": self.session_id,
                },
                flow="checkout",
                service_type=SERVICE_TYPE,
                sync_mode="async",
                io="none",
            )
            self.notifier.error("Unable to create checkout session")
            return None

        loki.log(
            "info",
            {
                "event_type": "checkout_redirect",
                "restaurant_id": restaurant.id,
                "items": len(request.cart_items),
                "latency_ms": round((time.perf_counter() - start) * 1000.0, 3),
                "session_id": self.session_id,
            },
            flow="checkout",
            service_type=SERVICE_TYPE,
            sync_mode="async",
            io="out",
        )
        self.navigate(url)
        return url
