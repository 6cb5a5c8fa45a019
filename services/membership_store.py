"""Server-side membership reads from Supabase (PostgREST)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from core.settings import ServerSettings

logger = logging.getLogger(__name__)

MEMBERSHIPS_TABLE = "memberships"


class MembershipStoreError(RuntimeError):
    """Raised when the membership table cannot be read."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class SupabaseMembershipStore:
    """Reads with the service-role key; never expose this client to browsers."""

    url: str
    service_key: str
    table: str = MEMBERSHIPS_TABLE
    timeout: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Accept": "application/json",
        }

    async def get_membership(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the membership row for ``user_id`` or ``None`` when absent."""
        endpoint = f"{self.url.rstrip('/')}/rest/v1/{self.table}"
        params = {"select": "*", "user_id": f"eq.{user_id}", "limit": "1"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(endpoint, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("Membership lookup for %s failed: %s", user_id, exc)
            raise MembershipStoreError(str(exc) or "membership_lookup_failed") from exc

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            message = payload.get("message") if isinstance(payload, dict) else None
            logger.warning("Supabase membership read %s: %s", response.status_code, payload)
            raise MembershipStoreError(message or "membership_lookup_failed", status_code=response.status_code)

        try:
            rows = response.json()
        except ValueError as exc:
            raise MembershipStoreError("membership_lookup_failed", status_code=response.status_code) from exc
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            return rows[0]
        return None


def get_membership_store(settings: Optional[ServerSettings] = None) -> SupabaseMembershipStore:
    resolved = settings or ServerSettings.from_env()
    if not resolved.supabase_url or not resolved.supabase_service_key:
        raise RuntimeError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE).")
    return SupabaseMembershipStore(
        url=resolved.supabase_url,
        service_key=resolved.supabase_service_key,
        timeout=resolved.http_timeout_seconds,
    )


__all__ = ["MembershipStoreError", "SupabaseMembershipStore", "get_membership_store"]
