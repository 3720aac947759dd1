"""Shared fixtures: captured Loki events, fake collaborators, clean sessions."""
from __future__ import annotations

from typing import Any, Dict, List

import pytest

from ordering_client.models.service_models import MenuItem, Restaurant
from ordering_client.observability.logging_loki import loki
from ordering_client.session import session_manager


@pytest.fixture()
def loki_events(monkeypatch) -> List[Dict[str, Any]]:
    """Every loki.log call as a flat dict (level + message + fields)."""
    events: List[Dict[str, Any]] = []

    def _capture(level, message, **fields):
        entry = {"level": level, **fields}
        if isinstance(message, dict):
            entry.update(message)
        else:
            entry["message"] = str(message)
        events.append(entry)

    monkeypatch.setattr(loki, "log", _capture)
    return events


@pytest.fixture(autouse=True)
def clean_sessions():
    session_manager.SESSION_STORE.clear()
    yield
    session_manager.SESSION_STORE.clear()


@pytest.fixture()
def burger() -> MenuItem:
    return MenuItem(id="m1", name="Burger", price=500)


@pytest.fixture()
def fries() -> MenuItem:
    return MenuItem(id="m2", name="Fries", price=250)


@pytest.fixture()
def restaurant_payload() -> Dict[str, Any]:
    return {
        "_id": "r1",
        "user": "u1",
        "restaurantName": "Luigi's",
        "city": "London",
        "country": "United Kingdom",
        "deliveryPrice": 299,
        "estimatedDeliveryTime": 30,
        "cuisines": ["Italian", "Pizza"],
        "menuItems": [
            {"_id": "m1", "name": "Burger", "price": 500},
            {"_id": "m2", "name": "Fries", "price": 250},
        ],
        "imageUrl": "https://images.example.com/luigis.png",
        "lastUpdated": "2024-05-01T10:00:00.000Z",
    }


@pytest.fixture()
def restaurant(restaurant_payload) -> Restaurant:
    return Restaurant.model_validate(restaurant_payload)


@pytest.fixture()
def delivery_details() -> Dict[str, str]:
    return {
        "name": "Ada Lovelace",
        "addressLine1": "12 Analytical Row",
        "city": "London",
        "country": "United Kingdom",
        "email": "ada@example.com",
    }
