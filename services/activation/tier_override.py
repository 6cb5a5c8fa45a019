"""Locally known "now paid" tier that outranks a lagging membership read."""

from __future__ import annotations

import logging
from typing import Optional

from core.tiers import MembershipTier, TierLike, coerce_tier, is_paid_tier

logger = logging.getLogger(__name__)


class TierOverride:
    """Set-once, never-reverting override for the lifetime of one page view."""

    def __init__(self) -> None:
        self._tier: Optional[MembershipTier] = None

    @property
    def tier(self) -> Optional[MembershipTier]:
        return self._tier

    @property
    def is_paid(self) -> bool:
        return self._tier is not None

    def record_paid(self, tier: TierLike) -> bool:
        """Remember ``tier`` if it is a paid tier and nothing is recorded yet."""
        if self._tier is not None:
            return False
        resolved = coerce_tier(tier)
        if resolved is None or not is_paid_tier(resolved):
            return False
        self._tier = resolved
        logger.debug("Tier override set to %s", resolved.value)
        return True

    def resolve(self, store_tier: TierLike) -> MembershipTier:
        if self._tier is not None:
            return self._tier
        return coerce_tier(store_tier) or MembershipTier.ACCESS


__all__ = ["TierOverride"]
