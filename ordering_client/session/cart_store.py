from __future__ import annotations

import json
from typing import Dict, List, Optional

from ordering_client.models.service_models import CartItem, MenuItem
from ordering_client.observability.logging_loki import loki
from ordering_client.session.session_storage import SessionStorage


SERVICE_TYPE = "cart_store"


def cart_key(restaurant_id: str) -> str:
    return f"cartItems-{restaurant_id}"


def add_cart_item(items: List[CartItem], menu_item: MenuItem) -> List[CartItem]:
    """Return a new cart with one more unit of `menu_item`.

    An existing line only has its quantity bumped; its name and price stay as
    first added.
    """
    if any(item.id == menu_item.id for item in items):
        return [
            item.model_copy(update={"quantity": item.quantity + 1}) if item.id == menu_item.id else item
            for item in items
        ]
    return [
        *items,
        CartItem(id=menu_item.id, name=menu_item.name, unit_price=menu_item.price, quantity=1),
    ]


def remove_cart_item(items: List[CartItem], item_id: str) -> List[CartItem]:
    return [item for item in items if item.id != item_id]


def dump_cart(items: List[CartItem]) -> str:
    return json.dumps([item.to_wire() for item in items], ensure_ascii=False)


def load_cart(raw: Optional[str]) -> List[CartItem]:
    """Parse a persisted cart; anything unreadable is an empty cart."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            return []
        return [CartItem.model_validate(entry) for entry in data]
    except (ValueError, TypeError):
        return []


class CartStore:
    """
    Per-restaurant carts for one browser session.

    Every mutation updates memory first and then writes the whole cart to
    session storage under `cartItems-{restaurant_id}`. A failed write is
    logged and otherwise ignored; memory stays authoritative.
    """

    def __init__(self, storage: SessionStorage, session_id: Optional[str] = None) -> None:
        self.storage = storage
        self.session_id = session_id
        self._carts: Dict[Optional[str], List[CartItem]] = {}

    def get_cart(self, restaurant_id: Optional[str]) -> List[CartItem]:
        return list(self._load(restaurant_id))

    def add_item(self, restaurant_id: Optional[str], menu_item: MenuItem) -> List[CartItem]:
        items = add_cart_item(self._load(restaurant_id), menu_item)
        self._commit(restaurant_id, items)
        return list(items)

    def remove_item(self, restaurant_id: Optional[str], item_id: str) -> List[CartItem]:
        items = remove_cart_item(self._load(restaurant_id), item_id)
        self._commit(restaurant_id, items)
        return list(items)

    def clear(self, restaurant_id: Optional[str]) -> None:
        self._commit(restaurant_id, [])

    def _load(self, restaurant_id: Optional[str]) -> List[CartItem]:
        if restaurant_id in self._carts:
            return self._carts[restaurant_id]

        items: List[CartItem] = []
        if restaurant_id:
            try:
                items = load_cart(self.storage.get_item(cart_key(restaurant_id)))
            except Exception as e:
                self._warn("cart_load_failed", restaurant_id, str(e))

        self._carts[restaurant_id] = items
        return items

    def _commit(self, restaurant_id: Optional[str], items: List[CartItem]) -> None:
        self._carts[restaurant_id] = items

        if not restaurant_id:
            self._warn("state_inconsistency", restaurant_id, "restaurant_id missing, cart not persisted")
            return

        try:
            self.storage.set_item(cart_key(restaurant_id), dump_cart(items))
        except Exception as e:
            self._warn("cart_persist_failed", restaurant_id, str(e))

    def _warn(self, event_type: str, restaurant_id: Optional[str], detail: str) -> None:
        loki.log(
            "warning",
            {
                "event_type": event_type,
                "restaurant_id": restaurant_id,
                "detail": detail,
                "session_id": self.session_id,
            },
            service_type=SERVICE_TYPE,
            sync_mode="sync",
            io="none",
        )
