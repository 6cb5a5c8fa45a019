"""Checkout proxy: forwards the browser's checkout request to the membership API."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request

from core.settings import ServerSettings
from web.deps import error_response, forwarded_headers, get_server_settings, get_upstream_transport, relay_response

router = APIRouter(prefix="/checkout", tags=["Checkout"])

logger = logging.getLogger(__name__)


@router.post("", summary="Start a hosted checkout through the upstream API.")
async def proxy_checkout(
    request: Request,
    settings: ServerSettings = Depends(get_server_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_upstream_transport),
):
    try:
        payload = await request.json()
    except ValueError:
        return error_response(400, "invalid_json")

    headers = {"Content-Type": "application/json"}
    headers.update(forwarded_headers(request, "authorization", "cookie"))
    target = f"{settings.api_upstream}/api/checkout"
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=transport) as client:
            upstream = await client.post(target, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        logger.error("checkout proxy failed: %s", exc)
        return error_response(500, "checkout_proxy_failed")

    if upstream.status_code >= 400:
        logger.info("Upstream checkout answered %s", upstream.status_code)
    return relay_response(upstream)
