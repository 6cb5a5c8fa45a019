"""Passwordless sign-in links through Supabase Auth (GoTrue ``/otp``)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from core.env import env_bool, env_first

logger = logging.getLogger(__name__)


class MagicLinkError(RuntimeError):
    """Raised when the auth provider refuses or fails to send a sign-in link."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class MagicLinkSender(Protocol):
    async def send_magic_link(self, email: str, redirect_url: str) -> None: ...


def _auth_headers(api_key: str) -> Dict[str, str]:
    return {
        "apikey": api_key,
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


@dataclass(slots=True)
class SupabaseMagicLinkSender:
    """Send magic links with the project's public (anon) key."""

    url: str
    anon_key: str
    create_user: bool = True
    timeout: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def send_magic_link(self, email: str, redirect_url: str) -> None:
        endpoint = f"{self.url.rstrip('/')}/auth/v1/otp"
        body = {"email": email, "create_user": self.create_user}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    endpoint,
                    params={"redirect_to": redirect_url},
                    headers=_auth_headers(self.anon_key),
                    json=body,
                )
        except httpx.HTTPError as exc:
            logger.warning("Magic link request for %s failed: %s", email, exc)
            raise MagicLinkError("Could not reach the sign-in service.") from exc

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {"body": response.text}
            if not isinstance(payload, dict):
                payload = {"body": payload}
            message = payload.get("msg") or payload.get("error_description") or payload.get("message") or "Could not send sign-in link."
            logger.warning("Supabase OTP error %s for %s: %s", response.status_code, email, payload)
            raise MagicLinkError(str(message), status_code=response.status_code, payload=payload)
        logger.info("Sent magic link to %s (redirect=%s)", email, redirect_url)


def get_magic_link_sender() -> SupabaseMagicLinkSender:
    url = env_first("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
    anon_key = env_first("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")
    if not url or not anon_key:
        raise RuntimeError("Supabase auth is not configured (SUPABASE_URL / SUPABASE_ANON_KEY).")
    return SupabaseMagicLinkSender(
        url=url,
        anon_key=anon_key,
        create_user=env_bool("SUPABASE_MAGIC_LINK_CREATE_USER", True),
    )


__all__ = ["MagicLinkError", "MagicLinkSender", "SupabaseMagicLinkSender", "get_magic_link_sender"]
