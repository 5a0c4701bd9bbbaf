"""
Referral milestone ladder.

Ordered tiers of (valid referral target, reward). Targets are strictly
increasing; tiers must be claimed in order.
"""

from decimal import Decimal
from typing import NamedTuple


class MilestoneTier(NamedTuple):
    """One tier of the ladder."""

    id: str
    target: int
    reward: Decimal


MILESTONE_LADDER: tuple[MilestoneTier, ...] = (
    MilestoneTier("VIP1", 5, Decimal("1000")),
    MilestoneTier("VIP2", 15, Decimal("5000")),
    MilestoneTier("VIP3", 30, Decimal("9000")),
    MilestoneTier("VIP4", 50, Decimal("20000")),
    MilestoneTier("VIP5", 70, Decimal("30000")),
    MilestoneTier("VIP6", 130, Decimal("60000")),
    MilestoneTier("VIP7", 250, Decimal("100000")),
    MilestoneTier("VIP8", 300, Decimal("120000")),
    MilestoneTier("VIP9", 400, Decimal("150000")),
    MilestoneTier("VIP10", 500, Decimal("200000")),
    MilestoneTier("VIP11", 900, Decimal("250000")),
    MilestoneTier("VIP12", 1200, Decimal("320000")),
    MilestoneTier("VIP13", 2000, Decimal("400000")),
)

MILESTONES_BY_TARGET: dict[int, MilestoneTier] = {
    tier.target: tier for tier in MILESTONE_LADDER
}


def get_tier(target: int) -> MilestoneTier | None:
    """Get tier by referral target."""
    return MILESTONES_BY_TARGET.get(target)


def lower_tiers(target: int) -> tuple[MilestoneTier, ...]:
    """All tiers strictly below ``target``, ascending."""
    return tuple(tier for tier in MILESTONE_LADDER if tier.target < target)
