from __future__ import annotations

from typing import Any, List, Optional, Tuple

import httpx

from ordering_client.models.restaurant_form import RestaurantForm, restaurant_form_fields
from ordering_client.models.service_models import Restaurant
from ordering_client.services.base import ServiceContext, ServiceResult, call_service


SERVICE_TYPE = "restaurant_service"


async def get_restaurant(
    ctx: ServiceContext,
    restaurant_id: str,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="get_restaurant",
        method="GET",
        path=f"/api/restaurant/{restaurant_id}",
        model=Restaurant,
        client=client,
        base_url=base_url,
    )


async def get_my_restaurant(
    ctx: ServiceContext,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="get_my_restaurant",
        method="GET",
        path="/api/my/restaurant",
        model=Restaurant,
        client=client,
        base_url=base_url,
    )


def _multipart(form: RestaurantForm) -> List[Tuple[str, Any]]:
    # (None, value) parts are plain form fields without a filename
    parts: List[Tuple[str, Any]] = [
        (name, (None, value)) for name, value in restaurant_form_fields(form)
    ]
    if form.image_file:
        parts.append(("imageFile", ("image", form.image_file, "application/octet-stream")))
    return parts


async def create_my_restaurant(
    ctx: ServiceContext,
    form: RestaurantForm,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="create_my_restaurant",
        method="POST",
        path="/api/my/restaurant",
        model=Restaurant,
        multipart=_multipart(form),
        client=client,
        base_url=base_url,
    )


async def update_my_restaurant(
    ctx: ServiceContext,
    form: RestaurantForm,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    return await call_service(
        ctx,
        service_type=SERVICE_TYPE,
        reason="update_my_restaurant",
        method="PUT",
        path="/api/my/restaurant",
        model=Restaurant,
        multipart=_multipart(form),
        client=client,
        base_url=base_url,
    )
