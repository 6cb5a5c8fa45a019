"""Shared FastAPI dependencies and upstream relay helpers."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, Request
from fastapi.responses import JSONResponse, Response

from core.settings import ServerSettings
from services.membership_store import SupabaseMembershipStore, get_membership_store

logger = logging.getLogger(__name__)


def get_server_settings() -> ServerSettings:
    """Resolve settings per request so env changes apply without a restart."""
    return ServerSettings.from_env()


def get_upstream_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for upstream calls; ``None`` uses httpx's network transport."""
    return None


def get_optional_membership_store(
    settings: ServerSettings = Depends(get_server_settings),
) -> Optional[SupabaseMembershipStore]:
    try:
        return get_membership_store(settings)
    except RuntimeError as exc:
        logger.error("Membership store unavailable: %s", exc)
        return None


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error})


def forwarded_headers(request: Request, *names: str) -> Dict[str, str]:
    """Copy the named request headers that are present and non-empty."""
    headers: Dict[str, str] = {}
    for name in names:
        value = request.headers.get(name)
        if value:
            headers[name] = value
    return headers


def relay_response(upstream: httpx.Response) -> Response:
    """Relay an upstream reply: JSON bodies re-encoded, anything else verbatim."""
    content_type = upstream.headers.get("content-type") or "application/json"
    data: Any
    try:
        data = upstream.json()
    except ValueError:
        data = None
    if data is None:
        return Response(content=upstream.content, status_code=upstream.status_code, media_type=content_type)
    return JSONResponse(status_code=upstream.status_code, content=data)


__all__ = [
    "error_response",
    "forwarded_headers",
    "get_optional_membership_store",
    "get_server_settings",
    "get_upstream_transport",
    "relay_response",
]
