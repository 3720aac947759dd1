from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

import httpx
from pydantic import BaseModel

from ordering_client.observability.logging_loki import loki


@dataclass
class ServiceContext:
    access_token: Optional[str] = None
    session_id: Optional[str] = None
    trace_id: Optional[str] = None


@dataclass
class ServiceResult:
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    status_code: Optional[int] = None


def _headers(ctx: ServiceContext) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if ctx.access_token:
        headers["Authorization"] = f"Bearer {ctx.access_token}"
    if ctx.trace_id:
        headers["X-Trace-Id"] = ctx.trace_id
    return headers


def _parse(data: Any, model: Optional[Type[BaseModel]], many: bool) -> Any:
    if model is None:
        return data
    if many:
        if not isinstance(data, list):
            raise ValueError(f"expected a list, got {type(data).__name__}")
        return [model.model_validate(item) for item in data]
    return model.model_validate(data)


async def call_service(
    ctx: ServiceContext,
    *,
    service_type: str,
    reason: str,
    method: str,
    path: str,
    model: Optional[Type[BaseModel]] = None,
    many: bool = False,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
    multipart: Optional[List[Tuple[str, Any]]] = None,
    client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> ServiceResult:
    """
    Perform one request against the remote ordering API.

    Never raises for transport, HTTP status or response-shape problems: those
    come back as ServiceResult(success=False) after being logged, so the
    calling flow decides how to notify the user.
    """
    base = base_url or os.getenv("API_BASE_URL")
    if not base:
        loki.log(
            "error",
            {
                "event_type": "service_missing_config",
                "detail": "API_BASE_URL not set",
                "reason": reason,
                "session_id": ctx.session_id,
                "trace_id": ctx.trace_id,
            },
            service_type=service_type,
            sync_mode="async",
            io="none",
        )
        return ServiceResult(success=False, error="API_BASE_URL not set")

    url = base.rstrip("/") + path
    start = time.perf_counter()

    loki.log(
        "info",
        {
            "event_type": "service_call",
            "reason": reason,
            "method": method,
            "path": path,
            "session_id": ctx.session_id,
            "trace_id": ctx.trace_id,
        },
        service_type=service_type,
        sync_mode="async",
        io="out",
    )

    status_code: Optional[int] = None
    try:
        if client is None:
            async with httpx.AsyncClient() as owned:
                resp = await owned.request(
                    method, url, params=params, json=json, files=multipart, headers=_headers(ctx)
                )
        else:
            resp = await client.request(
                method, url, params=params, json=json, files=multipart, headers=_headers(ctx)
            )

        status_code = resp.status_code
        resp.raise_for_status()
        payload = resp.json() if resp.content else None
        parsed = _parse(payload, model, many)

    except (httpx.HTTPError, ValueError) as e:
        # pydantic.ValidationError and JSON decode errors are both ValueErrors
        latency_ms = round((time.perf_counter() - start) * 1000.0, 3)
        loki.log(
            "error",
            {
                "event_type": "service_error",
                "reason": reason,
                "status_code": status_code,
                "latency_ms": latency_ms,
                "error": str(e),
                "session_id": ctx.session_id,
                "trace_id": ctx.trace_id,
            },
            service_type=service_type,
            sync_mode="async",
            io="none",
        )
        return ServiceResult(success=False, error=str(e), status_code=status_code)

    latency_ms = round((time.perf_counter() - start) * 1000.0, 3)
    loki.log(
        "info",
        {
            "event_type": "service_return",
            "reason": reason,
            "status_code": status_code,
            "latency_ms": latency_ms,
            "raw_shape": type(payload).__name__,
            "session_id": ctx.session_id,
            "trace_id": ctx.trace_id,
        },
        service_type=service_type,
        sync_mode="async",
        io="in",
    )

    return ServiceResult(success=True, data=parsed, status_code=status_code)
