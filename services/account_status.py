"""Derive the UI's tier/status pair from the account API payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from core.tiers import AppStatus, MembershipTier, TierLike, coerce_tier, is_active_status, is_paid_tier
from services.activation.tier_override import TierOverride

_BILLING_TO_APP_STATUS = {
    "active": AppStatus.PAID,
    "trialing": AppStatus.TRIAL,
}


def derive_account_status(account: Optional[Mapping[str, Any]]) -> Tuple[MembershipTier, AppStatus]:
    """Map ``{members: {tier, status}}`` onto (tier, app status).

    Billing ``active`` reads as paid, ``trialing`` as trial. Anything else is
    ``free`` for the access tier and ``inactive`` for a lapsed paid tier.
    """

    members = account.get("members") if isinstance(account, Mapping) else None
    members = members if isinstance(members, Mapping) else {}
    tier = coerce_tier(members.get("tier"))
    if tier not in (MembershipTier.MEMBER, MembershipTier.PRO):
        tier = MembershipTier.ACCESS

    raw_status = str(members.get("status") or "").strip().lower()
    status = _BILLING_TO_APP_STATUS.get(raw_status)
    if status is None:
        status = AppStatus.FREE if tier is MembershipTier.ACCESS else AppStatus.INACTIVE
    return tier, status


def is_active_paid(tier: TierLike, status: Any) -> bool:
    """Paid and usable right now (trial included)."""
    return is_paid_tier(tier) and is_active_status(status)


def should_show_trial(
    *,
    ready: bool,
    signed_in: bool,
    tier: TierLike = None,
    status: Any = None,
) -> bool:
    """Whether to promote the £1 trial.

    Nothing is shown while auth is still resolving. Logged-out visitors, the
    access tier and lapsed paid tiers see it; active paid members do not.
    """

    if not ready:
        return False
    if not signed_in:
        return True
    resolved = coerce_tier(tier) or MembershipTier.ACCESS
    if resolved is MembershipTier.ACCESS:
        return True
    return not is_active_paid(resolved, status)


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    user_id: Optional[str]
    email: Optional[str]
    name: Optional[str]
    tier: MembershipTier
    status: AppStatus

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]], *, user_id: Optional[str] = None) -> "AccountSnapshot":
        tier, status = derive_account_status(payload)
        data = payload or {}
        return cls(
            user_id=str(data.get("user_id") or user_id or "") or None,
            email=data.get("email") or None,
            name=data.get("full_name") or None,
            tier=tier,
            status=status,
        )

    def effective_tier(self, override: Optional[TierOverride] = None) -> MembershipTier:
        if override is None:
            return self.tier
        return override.resolve(self.tier)

    def is_paid(self, override: Optional[TierOverride] = None) -> bool:
        """True when the store (or a recorded override) says the user pays."""
        if override is not None and override.is_paid:
            return True
        return is_active_paid(self.tier, self.status)


__all__ = ["AccountSnapshot", "derive_account_status", "is_active_paid", "should_show_trial"]
