"""Operator-facing restaurant form.

The form works in major units (what the operator types); the remote service
stores minor units. `restaurant_form_fields` and `restaurant_to_form` are the
only places where form values cross that boundary.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ordering_client.errors import ValidationError
from ordering_client.models.service_models import Restaurant
from ordering_client.pricing import to_major_units, to_minor_units


class MenuItemForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    price: Decimal = Field(ge=Decimal("0.01"))


class RestaurantForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    restaurant_name: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    delivery_price: Decimal = Field(default=Decimal("0"), ge=0)
    estimated_delivery_time: int = Field(default=30, ge=5, le=180)
    cuisines: List[str] = Field(min_length=1)
    menu_items: List[MenuItemForm] = Field(min_length=1)
    image_url: Optional[str] = None
    image_file: Optional[bytes] = None

    @model_validator(mode="after")
    def _require_image(self) -> "RestaurantForm":
        if not (self.image_url or self.image_file):
            raise ValueError("Either image URL or image file must be provided")
        return self


def parse_restaurant_form(data: Dict[str, Any]) -> RestaurantForm:
    try:
        return RestaurantForm.model_validate(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", "Invalid restaurant form"), field=field)


def restaurant_form_fields(form: RestaurantForm) -> List[Tuple[str, str]]:
    """Multipart text fields for POST/PUT /api/my/restaurant, prices in minor units."""
    fields: List[Tuple[str, str]] = [
        ("restaurantName", form.restaurant_name),
        ("city", form.city),
        ("country", form.country),
        ("deliveryPrice", str(to_minor_units(form.delivery_price))),
        ("estimatedDeliveryTime", str(form.estimated_delivery_time)),
    ]

    for index, cuisine in enumerate(form.cuisines):
        fields.append((f"cuisines[{index}]", cuisine))

    for index, item in enumerate(form.menu_items):
        fields.append((f"menuItems[{index}][name]", item.name))
        fields.append((f"menuItems[{index}][price]", str(to_minor_units(item.price))))

    # an uploaded file wins over an existing URL
    if not form.image_file and form.image_url:
        fields.append(("imageUrl", form.image_url))

    return fields


def restaurant_to_form(restaurant: Restaurant) -> RestaurantForm:
    """Prefill the edit form from a stored record.

    Stored records may predate the form rules (free items, no cuisines, no
    image), so the form is built unvalidated. The rules apply on save, through
    `parse_restaurant_form`.
    """
    return RestaurantForm.model_construct(
        restaurant_name=restaurant.restaurant_name,
        city=restaurant.city,
        country=restaurant.country,
        delivery_price=to_major_units(restaurant.delivery_price),
        estimated_delivery_time=restaurant.estimated_delivery_time,
        cuisines=list(restaurant.cuisines),
        menu_items=[
            MenuItemForm.model_construct(name=item.name, price=to_major_units(item.price))
            for item in restaurant.menu_items
        ],
        image_url=restaurant.image_url,
    )
