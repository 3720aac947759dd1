from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from ordering_client.flows.order_flow import OrderLifecycleTracker
from ordering_client.flows.restaurant_flow import RestaurantManager
from ordering_client.flows.search_flow import SearchQueryController
from ordering_client.notifications import Notifier
from ordering_client.services import order_service, restaurant_service
from ordering_client.services.base import ServiceContext
from ordering_client.session.cart_store import CartStore
from ordering_client.session.session_storage import (
    FileSessionStorage,
    InMemorySessionStorage,
    SessionStorage,
)


CART_STORAGE_DIR = os.getenv("CART_STORAGE_DIR")


def _storage_for(session_id: str) -> SessionStorage:
    if CART_STORAGE_DIR:
        return FileSessionStorage(CART_STORAGE_DIR, session_id)
    return InMemorySessionStorage()


@dataclass
class ClientSession:
    session_id: str
    notifier: Notifier
    cart_store: CartStore
    context: ServiceContext
    request_count: int = 0
    last_active_at: Optional[datetime] = None
    search_city: Optional[str] = None
    search: SearchQueryController = field(default_factory=SearchQueryController)
    order_tracker: Optional[OrderLifecycleTracker] = None
    restaurant_manager: Optional[RestaurantManager] = None

    def enter_search(self, city: str) -> SearchQueryController:
        """Search state lives for one visit to a city's search page."""
        if city != self.search_city:
            self.search_city = city
            self.search.enter()
        return self.search

    def get_order_tracker(self) -> OrderLifecycleTracker:
        if self.order_tracker is None:
            # collaborators read self.context at call time so the latest token is used
            self.order_tracker = OrderLifecycleTracker(
                fetch_orders=lambda: order_service.get_my_restaurant_orders(self.context),
                update_status=lambda order_id, status: order_service.update_order_status(
                    self.context, order_id, status
                ),
                notifier=self.notifier,
                refetch_on_success=os.getenv("ORDERS_REFETCH_ON_UPDATE") == "1",
                session_id=self.session_id,
            )
        return self.order_tracker

    def get_restaurant_manager(self) -> RestaurantManager:
        if self.restaurant_manager is None:
            self.restaurant_manager = RestaurantManager(
                fetch_restaurant=lambda: restaurant_service.get_my_restaurant(self.context),
                create_restaurant=lambda form: restaurant_service.create_my_restaurant(self.context, form),
                update_restaurant=lambda form: restaurant_service.update_my_restaurant(self.context, form),
                notifier=self.notifier,
            )
        return self.restaurant_manager


SESSION_STORE: Dict[str, ClientSession] = {}


def get_session(session_id: str) -> ClientSession:
    if session_id not in SESSION_STORE:
        SESSION_STORE[session_id] = ClientSession(
            session_id=session_id,
            notifier=Notifier(session_id=session_id),
            cart_store=CartStore(_storage_for(session_id), session_id=session_id),
            context=ServiceContext(session_id=session_id),
            last_active_at=datetime.now(timezone.utc),
        )
    return SESSION_STORE[session_id]
