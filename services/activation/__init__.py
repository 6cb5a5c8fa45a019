"""Post-checkout membership activation (confirmation polling + email fallback)."""

from .errors import ActivationError, LookupFailedError, NoEmailAvailableError
from .escalation import EmailLinkEscalator, EscalationResult
from .factory import build_reconciler
from .presentation import ActivationView, Display, OverlayView, present
from .reconciler import ActivationReconciler
from .redirect import CheckoutRedirect, RedirectLocation, extract_checkout_redirect, strip_redirect_params
from .sent_links import JsonSentLinkStore, MemorySentLinkStore, SentLinkStore, sent_link_key
from .state import Phase, ReconciliationState, transition
from .tier_override import TierOverride

__all__ = [
    "ActivationError",
    "ActivationReconciler",
    "ActivationView",
    "CheckoutRedirect",
    "Display",
    "EmailLinkEscalator",
    "EscalationResult",
    "JsonSentLinkStore",
    "LookupFailedError",
    "MemorySentLinkStore",
    "NoEmailAvailableError",
    "OverlayView",
    "Phase",
    "ReconciliationState",
    "RedirectLocation",
    "SentLinkStore",
    "TierOverride",
    "build_reconciler",
    "extract_checkout_redirect",
    "present",
    "sent_link_key",
    "strip_redirect_params",
    "transition",
]
