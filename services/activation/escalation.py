"""Fallback from checkout confirmation to a passwordless sign-in email."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from services.activation.errors import LookupFailedError, NoEmailAvailableError
from services.activation.sent_links import SentLinkStore, normalize_email, sent_link_key
from services.magic_link import MagicLinkSender
from services.membership_api import MembershipApiError

logger = logging.getLogger(__name__)

LOOKUP_FAILED_MESSAGE = "Could not retrieve checkout session details."
NO_EMAIL_MESSAGE = "We couldn't determine your email for activation."


class CheckoutSessionLookup(Protocol):
    async def checkout_session_email(self, session_id: str) -> Optional[str]: ...


@dataclass(frozen=True, slots=True)
class EscalationResult:
    email: str
    sent: bool


class EmailLinkEscalator:
    """Look up the checkout email and send at most one automatic link per pair.

    Manual resends go through :meth:`resend`, which ignores the dedup record.
    """

    def __init__(
        self,
        *,
        lookup: CheckoutSessionLookup,
        sender: MagicLinkSender,
        sent_links: SentLinkStore,
        redirect_url: str,
    ) -> None:
        self._lookup = lookup
        self._sender = sender
        self._sent_links = sent_links
        self._redirect_url = redirect_url

    @property
    def redirect_url(self) -> str:
        return self._redirect_url

    async def lookup_email(self, session_id: str) -> str:
        try:
            email = await self._lookup.checkout_session_email(session_id)
        except (MembershipApiError, httpx.HTTPError) as exc:
            logger.warning("Checkout session lookup failed for %s: %s", session_id, exc)
            raise LookupFailedError(LOOKUP_FAILED_MESSAGE) from exc
        if not email or not email.strip():
            raise NoEmailAvailableError(NO_EMAIL_MESSAGE)
        return email.strip()

    async def escalate(self, session_id: str) -> EscalationResult:
        """Send the automatic link for ``session_id`` unless one already went out.

        A failed send propagates and leaves no record, so a later visit retries.
        """

        email = await self.lookup_email(session_id)
        key = sent_link_key(session_id, normalize_email(email))
        if self._sent_links.has(key):
            logger.info("Activation link for session %s already sent; skipping automatic send.", session_id)
            return EscalationResult(email=email, sent=False)

        await self._sender.send_magic_link(email, self._redirect_url)
        self._sent_links.set(key)
        return EscalationResult(email=email, sent=True)

    async def resend(self, email: str) -> None:
        await self._sender.send_magic_link(email, self._redirect_url)


__all__ = [
    "CheckoutSessionLookup",
    "EmailLinkEscalator",
    "EscalationResult",
    "LOOKUP_FAILED_MESSAGE",
    "NO_EMAIL_MESSAGE",
]
