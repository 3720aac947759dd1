from __future__ import annotations

from typing import Optional

import httpx

from ordering_client.models.service_models import CheckoutSessionRequest, CheckoutSessionResponse
from ordering_client.services.base import ServiceContext, ServiceResult, call_service


async def create_checkout_session(
    ctx: ServiceContext,
    request: CheckoutSessionRequest,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    return await call_service(
        ctx,
        service_type="checkout_service",
        reason="create_checkout_session",
        method="POST",
        path="/api/order/checkout/create-checkout-session",
        model=CheckoutSessionResponse,
        json=request.to_wire(),
        client=client,
        base_url=base_url,
    )
