"""Membership tier and status constants shared across services and routers."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Literal, Optional, Sequence, Union


class MembershipTier(str, Enum):
    ACCESS = "access"
    MEMBER = "member"
    PRO = "pro"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


class AppStatus(str, Enum):
    """UI-facing subscription status (billing statuses are mapped onto these)."""

    FREE = "free"
    TRIAL = "trial"
    PAID = "paid"
    INACTIVE = "inactive"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


SUPPORTED_TIERS: Sequence[MembershipTier] = tuple(MembershipTier)
PAID_TIERS = frozenset({MembershipTier.MEMBER, MembershipTier.PRO})
ACTIVE_STATUSES = frozenset({AppStatus.PAID, AppStatus.TRIAL})

AccessGate = Literal["any", "paid", "pro"]

# Rewards-entry multiplier shown next to the points balance.
BOOST: Dict[MembershipTier, float] = {
    MembershipTier.ACCESS: 1.0,
    MembershipTier.MEMBER: 1.25,
    MembershipTier.PRO: 1.5,
}

TierLike = Union[MembershipTier, str, None]
StatusLike = Union[AppStatus, str, None]


def coerce_tier(value: TierLike) -> Optional[MembershipTier]:
    """Return the matching tier or ``None`` for unknown/empty values."""
    if isinstance(value, MembershipTier):
        return value
    text = str(value or "").strip().lower()
    try:
        return MembershipTier(text)
    except ValueError:
        return None


def coerce_status(value: StatusLike) -> Optional[AppStatus]:
    if isinstance(value, AppStatus):
        return value
    text = str(value or "").strip().lower()
    try:
        return AppStatus(text)
    except ValueError:
        return None


def is_paid_tier(tier: TierLike) -> bool:
    return coerce_tier(tier) in PAID_TIERS


def is_active_status(status: StatusLike) -> bool:
    return coerce_status(status) in ACTIVE_STATUSES


def has_access(gate: AccessGate, tier: TierLike = None, status: StatusLike = None) -> bool:
    """Gate check used by tier-restricted pages."""
    if gate == "any":
        return True
    if gate == "pro":
        return coerce_tier(tier) is MembershipTier.PRO and is_active_status(status)
    return is_paid_tier(tier) and is_active_status(status)


def boost_for_tier(tier: TierLike) -> float:
    resolved = coerce_tier(tier)
    if resolved is None:
        return 1.0
    return BOOST.get(resolved, 1.0)


def boosted_points(points: Union[int, float], tier: TierLike) -> int:
    """Apply the tier multiplier to a points figure, rounded to a whole entry count."""
    return int(round(float(points or 0) * boost_for_tier(tier)))


__all__ = [
    "ACTIVE_STATUSES",
    "AccessGate",
    "AppStatus",
    "BOOST",
    "MembershipTier",
    "PAID_TIERS",
    "SUPPORTED_TIERS",
    "boost_for_tier",
    "boosted_points",
    "coerce_status",
    "coerce_tier",
    "has_access",
    "is_active_status",
    "is_paid_tier",
]
