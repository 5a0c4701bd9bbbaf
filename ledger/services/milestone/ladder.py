"""
Milestone ladder evaluation.

Pure functions computing tier status from a valid-referral count and
the set of already claimed targets. A tier is claimable only when the
count reaches its target and every lower tier is claimed.
"""

from dataclasses import dataclass
from decimal import Decimal

from ledger.config.milestones import MILESTONE_LADDER, MilestoneTier, get_tier, lower_tiers
from ledger.models.enums import MilestoneStatus


@dataclass(frozen=True)
class TierStatus:
    """One ladder tier as seen by a user."""

    id: str
    target: int
    reward: Decimal
    status: MilestoneStatus


@dataclass(frozen=True)
class MilestoneOverview:
    """Full ladder status for a user."""

    valid_referrals: int
    milestones: tuple[TierStatus, ...]
    next_target: int | None

    @property
    def claimable(self) -> tuple[TierStatus, ...]:
        """Tiers that can be claimed now (at most one)."""
        return tuple(m for m in self.milestones if m.status is MilestoneStatus.CLAIMABLE)


def evaluate_ladder(
    valid_referrals: int,
    claimed_targets: set[int],
    ladder: tuple[MilestoneTier, ...] = MILESTONE_LADDER,
) -> MilestoneOverview:
    """
    Compute status of every tier.

    ``next_target`` is the first tier, in ascending order, that is
    neither claimed nor claimable and whose target is not yet reached.

    Args:
        valid_referrals: Count of valid direct referrals
        claimed_targets: Targets with a claimed record
        ladder: Ladder to evaluate

    Returns:
        MilestoneOverview
    """
    milestones = []
    next_target: int | None = None
    all_previous_claimed = True

    for tier in ladder:
        if tier.target in claimed_targets:
            status = MilestoneStatus.CLAIMED
        elif valid_referrals >= tier.target and all_previous_claimed:
            status = MilestoneStatus.CLAIMABLE
        else:
            status = MilestoneStatus.LOCKED
            if valid_referrals < tier.target and next_target is None:
                next_target = tier.target

        if tier.target not in claimed_targets:
            all_previous_claimed = False

        milestones.append(
            TierStatus(id=tier.id, target=tier.target, reward=tier.reward, status=status)
        )

    return MilestoneOverview(
        valid_referrals=valid_referrals,
        milestones=tuple(milestones),
        next_target=next_target,
    )


def claim_error(
    target: int, valid_referrals: int, claimed_targets: set[int]
) -> str | None:
    """
    Validate a claim against the ladder.

    Checks run in a fixed order so each failure has one message.

    Returns:
        Error message, or None when the claim is allowed
    """
    tier = get_tier(target)
    if tier is None:
        return "Invalid milestone"
    if target in claimed_targets:
        return "Milestone already claimed"
    if valid_referrals < target:
        return "Referral target not reached"
    if any(lower.target not in claimed_targets for lower in lower_tiers(target)):
        return "Please claim previous milestones first"
    return None
