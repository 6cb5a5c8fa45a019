from __future__ import annotations

import pytest

from core.tiers import (
    AppStatus,
    MembershipTier,
    boost_for_tier,
    boosted_points,
    coerce_tier,
    has_access,
    is_paid_tier,
)
from services.activation.tier_override import TierOverride


def test_coerce_tier_is_case_insensitive():
    assert coerce_tier(" PRO ") is MembershipTier.PRO
    assert coerce_tier("gold") is None
    assert coerce_tier(None) is None


def test_paid_tiers():
    assert is_paid_tier("member")
    assert is_paid_tier(MembershipTier.PRO)
    assert not is_paid_tier("access")


@pytest.mark.parametrize(
    "gate,tier,status,expected",
    [
        ("any", None, None, True),
        ("paid", "member", "paid", True),
        ("paid", "member", "trial", True),
        ("paid", "member", "inactive", False),
        ("paid", "access", "free", False),
        ("pro", "member", "paid", False),
        ("pro", "pro", AppStatus.PAID, True),
    ],
)
def test_has_access(gate, tier, status, expected):
    assert has_access(gate, tier, status) is expected


def test_boost_multipliers():
    assert boost_for_tier("access") == 1.0
    assert boost_for_tier("member") == 1.25
    assert boost_for_tier("pro") == 1.5
    assert boost_for_tier("unknown") == 1.0
    assert boosted_points(10, "member") == 12
    assert boosted_points(10, "pro") == 15
    assert boosted_points(None, "pro") == 0


def test_tier_override_is_set_once_for_paid_tiers():
    override = TierOverride()
    assert override.resolve("access") is MembershipTier.ACCESS
    assert override.record_paid("access") is False
    assert override.is_paid is False
    assert override.record_paid("member") is True
    assert override.record_paid("pro") is False
    assert override.tier is MembershipTier.MEMBER
    assert override.resolve("access") is MembershipTier.MEMBER
    assert override.resolve(None) is MembershipTier.MEMBER


def test_tier_override_defaults_unknown_store_tier_to_access():
    assert TierOverride().resolve("platinum") is MembershipTier.ACCESS
