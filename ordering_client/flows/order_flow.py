from __future__ import annotations

from collections import Counter
from typing import Awaitable, Callable, List, Optional

from ordering_client.models.service_models import Order
from ordering_client.notifications import Notifier
from ordering_client.observability.logging_loki import loki
from ordering_client.services.base import ServiceResult


FetchOrders = Callable[[], Awaitable[ServiceResult]]
UpdateOrderStatus = Callable[[str, str], Awaitable[ServiceResult]]

SERVICE_TYPE = "order_flow"


class OrderLifecycleTracker:
    """
    A restaurant's active orders, as last fetched, plus status updates.

    Status values are opaque: the remote service alone decides which
    transitions are legal. The cached list is never patched after an update;
    it only changes when `list_orders` fetches again (or automatically when
    `refetch_on_success` is set).
    """

    def __init__(
        self,
        fetch_orders: FetchOrders,
        update_status: UpdateOrderStatus,
        notifier: Notifier,
        refetch_on_success: bool = False,
        session_id: Optional[str] = None,
    ) -> None:
        self._fetch_orders = fetch_orders
        self._update_status = update_status
        self.notifier = notifier
        self.refetch_on_success = refetch_on_success
        self.session_id = session_id
        self.orders: List[Order] = []
        self.is_loading = False
        # in-flight update calls per order id; duplicates are counted, not merged
        self._pending: Counter = Counter()

    def is_pending(self, order_id: str) -> bool:
        return self._pending[order_id] > 0

    async def list_orders(self) -> List[Order]:
        self.is_loading = True
        try:
            result = await self._fetch_orders()
        finally:
            self.is_loading = False

        if not result.success:
            self.notifier.error("Failed to fetch orders")
            return list(self.orders)

        self.orders = list(result.data or [])
        return list(self.orders)

    async def update_status(self, order_id: str, new_status: str) -> bool:
        self._pending[order_id] += 1
        try:
            result = await self._update_status(order_id, new_status)
        finally:
            self._pending[order_id] -= 1
            if self._pending[order_id] <= 0:
                del self._pending[order_id]

        loki.log(
            "info" if result.success else "error",
            {
                "event_type": "order_status_update",
                "order_id": order_id,
                "status": new_status,
                "outcome": "accepted" if result.success else "rejected",
                "status_code": result.status_code,
                "error": result.error,
                "session_id": self.session_id,
            },
            flow="orders",
            service_type=SERVICE_TYPE,
            sync_mode="async",
            io="in",
        )

        if not result.success:
            self.notifier.error("Unable to update order")
            return False

        self.notifier.success("Order updated")
        if self.refetch_on_success:
            await self.list_orders()
        return True
