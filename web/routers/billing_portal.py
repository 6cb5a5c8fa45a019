"""Billing portal endpoints: Stripe portal sessions and the upstream billing proxy."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from core.settings import ServerSettings
from schemas.api.membership import BillingPortalRequest, BillingPortalResponse, ErrorResponse
from services.billing_portal import BillingPortalError, create_portal_session
from web.deps import error_response, forwarded_headers, get_server_settings, get_upstream_transport, relay_response

router = APIRouter(prefix="/billing-portal", tags=["Billing"])

logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=BillingPortalResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Create a Stripe billing portal session.",
)
async def open_billing_portal(
    request: Request,
    settings: ServerSettings = Depends(get_server_settings),
):
    try:
        body = BillingPortalRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return error_response(400, "invalid_json")

    customer_id = (body.stripe_customer_id or "").strip()
    if not customer_id:
        return error_response(400, "missing_customer_id")

    try:
        url = await run_in_threadpool(create_portal_session, customer_id, body.return_url, settings=settings)
    except BillingPortalError as exc:
        return error_response(500, str(exc) or "server_error")
    return BillingPortalResponse(url=url)


@router.api_route("/proxy/{path:path}", methods=["GET", "POST"], summary="Relay billing calls to the upstream API.")
async def proxy_billing(
    path: str,
    request: Request,
    settings: ServerSettings = Depends(get_server_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_upstream_transport),
):
    target = f"{settings.api_upstream}/api/{path.lstrip('/')}"
    query = request.url.query
    if query:
        target = f"{target}?{query}"

    headers = {
        "x-user-id": request.headers.get("x-user-id") or "",
        "content-type": request.headers.get("content-type") or "application/json",
    }
    body = await request.body() if request.method == "POST" else None
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=transport) as client:
            upstream = await client.request(request.method, target, headers=headers, content=body)
    except httpx.HTTPError as exc:
        logger.error("billing proxy %s %s failed: %s", request.method, path, exc)
        return error_response(502, "billing_proxy_failed")
    return relay_response(upstream)
