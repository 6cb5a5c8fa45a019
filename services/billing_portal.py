"""Stripe billing portal sessions."""

from __future__ import annotations

import logging
from typing import Optional

import stripe

from core.settings import ServerSettings

logger = logging.getLogger(__name__)


class BillingPortalError(RuntimeError):
    """Raised when Stripe is unconfigured or rejects the portal request."""


def _init_stripe(settings: ServerSettings) -> None:
    key = (settings.stripe_secret_key or "").strip()
    if not key:
        raise BillingPortalError("Stripe not configured (missing STRIPE_SECRET_KEY)")
    stripe.api_key = key


def default_return_url(settings: ServerSettings) -> str:
    return f"{settings.web_base.rstrip('/')}/app"


def create_portal_session(
    customer_id: str,
    return_url: Optional[str] = None,
    *,
    settings: Optional[ServerSettings] = None,
) -> str:
    """Create a billing portal session for ``customer_id`` and return its URL."""

    resolved = settings or ServerSettings.from_env()
    _init_stripe(resolved)
    target = (return_url or "").strip() or default_return_url(resolved)
    try:
        portal = stripe.billing_portal.Session.create(customer=customer_id, return_url=target)
    except stripe.StripeError as exc:
        logger.warning("Stripe billing portal for %s failed: %s", customer_id, exc)
        raise BillingPortalError(getattr(exc, "user_message", None) or str(exc) or "server_error") from exc
    url = portal["url"]
    logger.info("Opened billing portal for customer %s", customer_id)
    return url


__all__ = ["BillingPortalError", "create_portal_session", "default_return_url"]
