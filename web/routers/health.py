"""Health-related API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from core.settings import ServerSettings
from web.deps import get_server_settings

router = APIRouter(prefix="/health", tags=["Health"])


def configuration_summary(settings: ServerSettings) -> Dict[str, bool]:
    """Report which upstream integrations are configured, without exposing secrets."""
    return {
        "supabase": bool(settings.supabase_url and settings.supabase_service_key),
        "magic_link": bool(settings.supabase_url and settings.supabase_anon_key),
        "stripe": bool(settings.stripe_secret_key),
    }


@router.get(
    "/status",
    summary="Service runtime status",
    description="Aggregated configuration status used by deployment probes.",
)
def read_service_status(settings: ServerSettings = Depends(get_server_settings)) -> Dict[str, Any]:
    integrations = configuration_summary(settings)
    status = "ok" if all(integrations.values()) else "degraded"
    return {"status": status, "upstream": settings.api_upstream, "integrations": integrations}


__all__ = ["router", "configuration_summary"]
