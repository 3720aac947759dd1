from __future__ import annotations

from typing import Optional

import httpx

from ordering_client.models.service_models import Order, UpdateOrderStatusRequest
from ordering_client.services.base import ServiceContext, ServiceResult, call_service


SERVICE_TYPE = "order_service"


async def get_my_restaurant_orders(
    ctx: ServiceContext,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="get_my_restaurant_orders",
        method="GET",
        path="/api/my/restaurant/order",
        model=Order,
        many=True,
        client=client,
        base_url=base_url,
    )


async def update_order_status(
    ctx: ServiceContext,
    order_id: str,
    status: str,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    # the response may be the updated order or a bare acknowledgement, so it is not modelled
    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="update_order_status",
        method="PATCH",
        path=f"/api/my/restaurant/order/{order_id}/status",
        json=UpdateOrderStatusRequest(status=status).model_dump(),
        client=client,
        base_url=base_url,
    )
