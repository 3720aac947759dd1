from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class WireModel(BaseModel):
    """Python field names, camelCase / `_id` names on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MenuItem(WireModel):
    id: str = Field(alias="_id")
    name: str
    price: int = Field(ge=0)  # minor units


class Restaurant(WireModel):
    id: str = Field(alias="_id")
    user: Optional[Any] = None
    restaurant_name: str = Field(alias="restaurantName")
    city: str
    country: str
    delivery_price: int = Field(alias="deliveryPrice", ge=0)  # minor units
    estimated_delivery_time: int = Field(alias="estimatedDeliveryTime")
    cuisines: List[str] = Field(default_factory=list)
    menu_items: List[MenuItem] = Field(alias="menuItems", default_factory=list)
    image_url: Optional[str] = Field(alias="imageUrl", default=None)
    last_updated: Optional[str] = Field(alias="lastUpdated", default=None)


class Pagination(BaseModel):
    page: int
    pages: int
    total: int


class RestaurantSearchResponse(BaseModel):
    data: List[Restaurant] = Field(default_factory=list)
    pagination: Pagination


class CartItem(WireModel):
    id: str = Field(alias="_id")
    name: str
    unit_price: int = Field(alias="price", ge=0)  # minor units
    quantity: int = Field(default=1, ge=1)


class DeliveryDetails(WireModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    address_line1: str = Field(alias="addressLine1", min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    email: EmailStr


class CheckoutCartItem(WireModel):
    menu_item_id: str = Field(alias="menuItemId")
    name: str
    # the checkout endpoint expects the quantity as a string
    quantity: str


class CheckoutSessionRequest(WireModel):
    cart_items: List[CheckoutCartItem] = Field(alias="cartItems")
    restaurant_id: str = Field(alias="restaurantId")
    delivery_details: DeliveryDetails = Field(alias="deliveryDetails")


class CheckoutSessionResponse(BaseModel):
    url: Optional[str] = None


class OrderItem(WireModel):
    menu_item_id: str = Field(alias="menuItemId")
    name: str
    quantity: int


class Order(WireModel):
    id: str = Field(alias="_id")
    status: str
    cart_items: List[OrderItem] = Field(alias="cartItems", default_factory=list)
    delivery_details: Optional[Dict[str, Any]] = Field(alias="deliveryDetails", default=None)
    total_amount: Optional[int] = Field(alias="totalAmount", default=None)
    created_at: Optional[str] = Field(alias="createdAt", default=None)
    restaurant: Optional[Any] = None
    user: Optional[Any] = None


class UpdateOrderStatusRequest(BaseModel):
    status: str


# Choices offered to operators. Legality of a transition is decided remotely.
ORDER_STATUSES = ("placed", "paid", "inProgress", "outForDelivery", "delivered")
