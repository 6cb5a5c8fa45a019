"""HTTP client for the membership API (checkout confirmation, session lookup, account)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import httpx

from core.settings import DEFAULT_API_BASE, ActivationSettings

logger = logging.getLogger(__name__)


class MembershipApiError(RuntimeError):
    """Raised when the membership API answers with an error or an unreadable body."""

    def __init__(self, status_code: int, message: str, *, payload: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class ConfirmStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    AUTH_REQUIRED = "auth_required"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ConfirmOutcome:
    status: ConfirmStatus
    message: Optional[str] = None
    tier: Optional[str] = None
    status_code: Optional[int] = None


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def classify_confirm_response(status_code: int, payload: Any) -> ConfirmOutcome:
    """Map a ``/api/confirm-checkout`` response onto one of four outcomes.

    ``401`` means the membership exists but nobody is signed in. ``{ok: true}``
    confirms, ``{pending: true}`` means the webhook has not landed yet, and
    anything else (including ``{error}`` bodies) is a failure.
    """

    if status_code == 401:
        return ConfirmOutcome(ConfirmStatus.AUTH_REQUIRED, status_code=status_code)
    data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    if status_code < 400 and data.get("ok") is True:
        tier = data.get("tier")
        return ConfirmOutcome(
            ConfirmStatus.CONFIRMED,
            tier=str(tier) if isinstance(tier, str) and tier.strip() else None,
            status_code=status_code,
        )
    if data.get("pending") is True:
        return ConfirmOutcome(ConfirmStatus.PENDING, status_code=status_code)
    error = data.get("error")
    message = error.strip() if isinstance(error, str) and error.strip() else None
    return ConfirmOutcome(ConfirmStatus.FAILED, message=message, status_code=status_code)


@dataclass(slots=True)
class MembershipApiClient:
    """Thin async wrapper over the membership API endpoints."""

    base_url: str = DEFAULT_API_BASE
    timeout: float = 10.0
    headers: Dict[str, str] = field(default_factory=dict)
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url.rstrip("/"),
            timeout=self.timeout,
            headers=self.headers,
            transport=self.transport,
        )

    async def confirm_checkout(self, session_id: str) -> ConfirmOutcome:
        """Ask whether checkout ``session_id`` has been reflected on the membership."""
        async with self._client() as client:
            response = await client.get("/api/confirm-checkout", params={"cs": session_id})
        outcome = classify_confirm_response(response.status_code, _json_or_none(response))
        logger.debug("confirm-checkout %s -> %s (%s)", session_id, outcome.status.value, response.status_code)
        return outcome

    async def checkout_session_email(self, session_id: str) -> Optional[str]:
        """Return the customer email recorded on the checkout session, if any."""
        async with self._client() as client:
            response = await client.get("/api/checkout/session", params={"session_id": session_id})
        payload = _json_or_none(response)
        if response.status_code >= 400:
            logger.warning("Checkout session lookup failed %s: %s", response.status_code, payload)
            raise MembershipApiError(
                response.status_code,
                "Could not retrieve checkout session details.",
                payload=payload if isinstance(payload, dict) else None,
            )
        if not isinstance(payload, Mapping):
            raise MembershipApiError(response.status_code, "Checkout session response was not JSON.")
        email = payload.get("email")
        if isinstance(email, str) and email.strip():
            return email.strip()
        return None

    async def fetch_account(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch ``/api/account``; any failure reads as "no account"."""
        try:
            async with self._client() as client:
                response = await client.get("/api/account", params={"user_id": user_id})
        except httpx.HTTPError as exc:
            logger.warning("Account fetch for %s failed: %s", user_id, exc)
            return None
        if response.status_code >= 400:
            return None
        payload = _json_or_none(response)
        return dict(payload) if isinstance(payload, Mapping) else None


def get_membership_api_client(settings: Optional[ActivationSettings] = None) -> MembershipApiClient:
    resolved = settings or ActivationSettings.from_env()
    return MembershipApiClient(base_url=resolved.api_base, timeout=resolved.http_timeout_seconds)


__all__ = [
    "ConfirmOutcome",
    "ConfirmStatus",
    "MembershipApiClient",
    "MembershipApiError",
    "classify_confirm_response",
    "get_membership_api_client",
]
