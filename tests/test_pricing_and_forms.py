from __future__ import annotations

from decimal import Decimal

import pytest

from ordering_client.errors import ValidationError
from ordering_client.models.restaurant_form import (
    parse_restaurant_form,
    restaurant_form_fields,
    restaurant_to_form,
)
from ordering_client.models.service_models import Restaurant
from ordering_client.pricing import format_price, to_major_units, to_minor_units


@pytest.mark.parametrize(
    "major, minor",
    [
        ("12.50", 1250),
        (Decimal("0.01"), 1),
        (0.29, 29),
        (3, 300),
        ("2.345", 235),
        ("0", 0),
    ],
)
def test_to_minor_units(major, minor):
    assert to_minor_units(major) == minor


@pytest.mark.parametrize("bad", ["abc", "", "NaN", "Infinity"])
def test_to_minor_units_rejects_non_amounts(bad):
    with pytest.raises(ValidationError):
        to_minor_units(bad)


def test_to_major_units_keeps_cents():
    assert to_major_units(1250) == Decimal("12.50")
    assert to_major_units(5) == Decimal("0.05")
    assert format_price(299) == "£2.99"


@pytest.fixture()
def form_data():
    return {
        "restaurant_name": "Luigi's",
        "city": "London",
        "country": "United Kingdom",
        "delivery_price": "2.99",
        "estimated_delivery_time": 25,
        "cuisines": ["Italian", "Pizza"],
        "menu_items": [{"name": "Margherita", "price": "8.50"}, {"name": "Tiramisu", "price": 4}],
        "image_url": "https://images.example.com/luigis.png",
    }


def test_form_fields_use_minor_units(form_data):
    fields = restaurant_form_fields(parse_restaurant_form(form_data))

    assert fields == [
        ("restaurantName", "Luigi's"),
        ("city", "London"),
        ("country", "United Kingdom"),
        ("deliveryPrice", "299"),
        ("estimatedDeliveryTime", "25"),
        ("cuisines[0]", "Italian"),
        ("cuisines[1]", "Pizza"),
        ("menuItems[0][name]", "Margherita"),
        ("menuItems[0][price]", "850"),
        ("menuItems[1][name]", "Tiramisu"),
        ("menuItems[1][price]", "400"),
        ("imageUrl", "https://images.example.com/luigis.png"),
    ]


@pytest.mark.parametrize(
    "override, field",
    [
        ({"restaurant_name": " "}, "restaurant_name"),
        ({"city": ""}, "city"),
        ({"delivery_price": "-1"}, "delivery_price"),
        ({"estimated_delivery_time": 4}, "estimated_delivery_time"),
        ({"estimated_delivery_time": 181}, "estimated_delivery_time"),
        ({"cuisines": []}, "cuisines"),
        ({"menu_items": []}, "menu_items"),
        ({"menu_items": [{"name": "Free water", "price": "0"}]}, "menu_items.0.price"),
        ({"menu_items": [{"name": "", "price": "1"}]}, "menu_items.0.name"),
    ],
)
def test_form_rules(form_data, override, field):
    with pytest.raises(ValidationError) as info:
        parse_restaurant_form({**form_data, **override})
    assert info.value.field == field


def test_form_requires_an_image(form_data):
    form_data.pop("image_url")
    with pytest.raises(ValidationError, match="image"):
        parse_restaurant_form(form_data)


def test_restaurant_round_trips_through_the_form(restaurant):
    form = restaurant_to_form(restaurant)

    assert form.delivery_price == Decimal("2.99")
    assert [item.price for item in form.menu_items] == [Decimal("5.00"), Decimal("2.50")]
    fields = dict(restaurant_form_fields(form))
    assert fields["deliveryPrice"] == str(restaurant.delivery_price)
    assert fields["menuItems[1][price]"] == "250"


def test_stored_record_outside_form_rules_still_prefills(restaurant_payload):
    restaurant = Restaurant.model_validate(
        {
            **restaurant_payload,
            "cuisines": [],
            "estimatedDeliveryTime": 240,
            "menuItems": [{"_id": "m9", "name": "Tap water", "price": 0}],
            "imageUrl": None,
        }
    )

    form = restaurant_to_form(restaurant)

    assert form.cuisines == []
    assert form.estimated_delivery_time == 240
    assert [(item.name, item.price) for item in form.menu_items] == [("Tap water", Decimal("0.00"))]

    # saving the unchanged form still applies the rules
    with pytest.raises(ValidationError):
        parse_restaurant_form(form.model_dump(exclude={"image_file"}))
