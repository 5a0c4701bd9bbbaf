"""
Unit tests for the referral milestone ladder.

Tests cover:
- Strictly increasing targets
- Claimable only when every lower tier is claimed
- next_target selection
- Claim validation order
"""

from decimal import Decimal

import pytest

from ledger.config.milestones import MILESTONE_LADDER, get_tier, lower_tiers
from ledger.models.enums import MilestoneStatus
from ledger.services.milestone.ladder import claim_error, evaluate_ladder


def _status_by_target(overview):
    return {m.target: m.status for m in overview.milestones}


class TestLadderConfig:
    """Test ladder constants."""

    def test_thirteen_tiers(self):
        """VIP1 through VIP13."""
        assert [tier.id for tier in MILESTONE_LADDER] == [
            f"VIP{n}" for n in range(1, 14)
        ]

    def test_targets_strictly_increasing(self):
        """Targets ascend without repeats."""
        targets = [tier.target for tier in MILESTONE_LADDER]
        assert all(a < b for a, b in zip(targets, targets[1:]))

    def test_first_and_last_tier(self):
        """Ladder ends."""
        assert get_tier(5).reward == Decimal("1000")
        assert get_tier(2000).reward == Decimal("400000")

    def test_lower_tiers(self):
        """Tiers strictly below a target."""
        assert [tier.target for tier in lower_tiers(30)] == [5, 15]
        assert lower_tiers(5) == ()


class TestEvaluateLadder:
    """Test tier status evaluation."""

    def test_no_referrals(self):
        """Everything locked, next target is the first tier."""
        overview = evaluate_ladder(0, set())

        assert all(m.status is MilestoneStatus.LOCKED for m in overview.milestones)
        assert overview.next_target == 5
        assert overview.claimable == ()

    def test_unclaimed_lower_tier_blocks_higher(self):
        """40 valid referrals with VIP1 unclaimed: only VIP1 is claimable."""
        overview = evaluate_ladder(40, set())
        statuses = _status_by_target(overview)

        assert statuses[5] is MilestoneStatus.CLAIMABLE
        assert statuses[15] is MilestoneStatus.LOCKED
        assert statuses[30] is MilestoneStatus.LOCKED
        assert overview.next_target == 50
        assert [m.target for m in overview.claimable] == [5]

    def test_claiming_unlocks_next(self):
        """After VIP1 is claimed VIP2 becomes claimable."""
        overview = evaluate_ladder(40, {5})
        statuses = _status_by_target(overview)

        assert statuses[5] is MilestoneStatus.CLAIMED
        assert statuses[15] is MilestoneStatus.CLAIMABLE
        assert statuses[30] is MilestoneStatus.LOCKED

    def test_at_most_one_claimable(self):
        """With a huge count only the lowest unclaimed tier is claimable."""
        overview = evaluate_ladder(5000, {5, 15, 30})

        assert [m.target for m in overview.claimable] == [50]
        assert overview.next_target is None

    def test_exact_target_is_reached(self):
        """Reaching the target exactly is enough."""
        overview = evaluate_ladder(5, set())
        assert _status_by_target(overview)[5] is MilestoneStatus.CLAIMABLE
        assert overview.next_target == 15


class TestClaimError:
    """Test claim validation."""

    def test_allowed_claim(self):
        """A reached, in-order, unclaimed tier is allowed."""
        assert claim_error(5, 5, set()) is None

    @pytest.mark.parametrize(
        ("target", "valid", "claimed", "message"),
        [
            (7, 100, set(), "Invalid milestone"),
            (5, 100, {5}, "Milestone already claimed"),
            (50, 40, set(), "Referral target not reached"),
            (15, 40, set(), "Please claim previous milestones first"),
            (30, 40, {5}, "Please claim previous milestones first"),
        ],
    )
    def test_rejections(self, target, valid, claimed, message):
        """Each failure has one message, checked in a fixed order."""
        assert claim_error(target, valid, claimed) == message
