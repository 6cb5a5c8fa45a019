"""Wire an :class:`ActivationReconciler` from environment configuration."""

from __future__ import annotations

from typing import Callable, Optional

from core.settings import ActivationSettings
from services.activation.escalation import EmailLinkEscalator
from services.activation.reconciler import ActivationReconciler
from services.activation.redirect import RedirectLocation
from services.activation.sent_links import JsonSentLinkStore, SentLinkStore
from services.activation.tier_override import TierOverride
from services.magic_link import MagicLinkSender, get_magic_link_sender
from services.membership_api import MembershipApiClient, get_membership_api_client
from services.ui_events import EventChannel


def build_reconciler(
    url: str,
    *,
    settings: Optional[ActivationSettings] = None,
    channel: Optional[EventChannel] = None,
    tier_override: Optional[TierOverride] = None,
    api: Optional[MembershipApiClient] = None,
    sender: Optional[MagicLinkSender] = None,
    sent_links: Optional[SentLinkStore] = None,
    on_url_replace: Optional[Callable[[str], None]] = None,
) -> ActivationReconciler:
    resolved = settings or ActivationSettings.from_env()
    client = api or get_membership_api_client(resolved)
    escalator = EmailLinkEscalator(
        lookup=client,
        sender=sender or get_magic_link_sender(),
        sent_links=sent_links or JsonSentLinkStore(resolved.sent_links_path),
        redirect_url=resolved.magic_link_redirect_url,
    )
    return ActivationReconciler(
        api=client,
        escalator=escalator,
        location=RedirectLocation(url, on_replace=on_url_replace),
        tier_override=tier_override,
        channel=channel,
        max_attempts=resolved.max_attempts,
        retry_delay=resolved.retry_delay_seconds,
        cooldown_seconds=resolved.resend_cooldown_seconds,
    )


__all__ = ["build_reconciler"]
