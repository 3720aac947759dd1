from __future__ import annotations

from typing import Optional

import httpx

from ordering_client.flows.search_flow import SearchState
from ordering_client.models.service_models import RestaurantSearchResponse
from ordering_client.observability.logging_loki import loki
from ordering_client.services.base import ServiceContext, ServiceResult, call_service


SERVICE_TYPE = "search_service"


async def search_restaurants(
    ctx: ServiceContext,
    city: Optional[str],
    state: SearchState,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    if not city:
        loki.log(
            "warning",
            {
                "event_type": "search_skipped",
                "detail": "no city selected",
                "session_id": ctx.session_id,
                "trace_id": ctx.trace_id,
            },
            service_type=SERVICE_TYPE,
            sync_mode="async",
            io="none",
        )
        return ServiceResult(success=False, error="city is required")

    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="search_restaurants",
        method="GET",
        path=f"/api/restaurant/search/{city}",
        model=RestaurantSearchResponse,
        params=state.to_query_params(),
        client=client,
        base_url=base_url,
    )
