"""Site-wide call-to-action copy and tier blurbs."""

from __future__ import annotations

from typing import Dict, NamedTuple

from core.tiers import MembershipTier, TierLike, coerce_tier

TRIAL_COPY = "Try Member for £1"

CTA: Dict[str, str] = {
    "join_free": "Join free to redeem",
    "try_member": TRIAL_COPY,
    "unlock_more": "Unlock more offers",
    "upgrade_pro": "Upgrade to Pro",
    "manage_billing": "Manage billing / Cancel",
}


class TierCopy(NamedTuple):
    label: str
    blurb: str


TIER_COPY: Dict[MembershipTier, TierCopy] = {
    MembershipTier.ACCESS: TierCopy(
        "ACCESS",
        "You can browse and redeem public offers. Upgrade any time to unlock benefits and monthly rewards.",
    ),
    MembershipTier.MEMBER: TierCopy(
        "MEMBER",
        "You've unlocked core benefits and monthly rewards entries. Explore offers and start saving today.",
    ),
    MembershipTier.PRO: TierCopy(
        "PRO",
        "You've unlocked all benefits, early-access deals and the highest monthly rewards entries.",
    ),
}


def tier_copy(tier: TierLike) -> TierCopy:
    return TIER_COPY[coerce_tier(tier) or MembershipTier.ACCESS]


def mask_card_id(user_id: str | None) -> str:
    """Shorten a member id for display, e.g. ``abcdef…wxyz``."""
    if not user_id:
        return "—"
    return f"{user_id[:6]}…{user_id[-4:]}"


__all__ = ["CTA", "TIER_COPY", "TRIAL_COPY", "TierCopy", "mask_card_id", "tier_copy"]
