"""
Integration tests for the milestone reward engine.

Tests cover:
- Valid referral counting (deposited and invested)
- In-order claims and double-claim protection
- Ladder status after claims
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from ledger.models import ReferralReward
from ledger.models.enums import MilestoneStatus
from ledger.services.milestone.milestone_service import MilestoneService


@pytest.fixture
def make_valid_referrals(make_user, make_product):
    """Create referrals that deposited and own a product."""

    async def _make(referrer_id: int, count: int) -> None:
        for _ in range(count):
            user_id = await make_user(referred_by=referrer_id, has_deposited=True)
            await make_product(user_id)

    return _make


class TestValidReferralCount:
    """Test the valid referral definition."""

    @pytest.mark.asyncio
    async def test_only_deposited_investors_count(
        self, session, make_user, make_product, make_valid_referrals
    ):
        """Deposit without product or product without deposit does not count."""
        referrer = await make_user()
        await make_valid_referrals(referrer, 2)
        await make_user(referred_by=referrer, has_deposited=True)
        no_deposit = await make_user(referred_by=referrer)
        await make_product(no_deposit)

        assert await MilestoneService(session).get_valid_referral_count(referrer) == 2

    @pytest.mark.asyncio
    async def test_indirect_referrals_do_not_count(
        self, session, make_user, make_valid_referrals
    ):
        """Only direct referrals are counted."""
        root = await make_user()
        child = await make_user(referred_by=root)
        await make_valid_referrals(child, 3)

        assert await MilestoneService(session).get_valid_referral_count(root) == 0


class TestClaimMilestone:
    """Test milestone claims."""

    @pytest.mark.asyncio
    async def test_claim_first_tier(
        self, session, make_user, make_valid_referrals, balance_of
    ):
        """Five valid referrals unlock 1,000."""
        referrer = await make_user()
        await make_valid_referrals(referrer, 5)

        result = await MilestoneService(session).claim_milestone(referrer, 5)

        assert result.success is True
        assert result.message == "Successfully claimed 1,000 reward!"
        assert await balance_of(referrer) == Decimal("1000")

    @pytest.mark.asyncio
    async def test_double_claim_rejected(
        self, session, make_user, make_valid_referrals, balance_of
    ):
        """The second claim of a tier pays nothing."""
        referrer = await make_user()
        await make_valid_referrals(referrer, 5)
        service = MilestoneService(session)

        await service.claim_milestone(referrer, 5)
        again = await service.claim_milestone(referrer, 5)

        assert again.success is False
        assert again.message == "Milestone already claimed"
        assert await balance_of(referrer) == Decimal("1000")
        records = (
            await session.execute(
                select(ReferralReward).where(ReferralReward.user_id == referrer)
            )
        ).scalars().all()
        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_out_of_order_claim_rejected(
        self, session, make_user, make_valid_referrals, balance_of
    ):
        """VIP2 cannot be claimed before VIP1."""
        referrer = await make_user()
        await make_valid_referrals(referrer, 15)

        result = await MilestoneService(session).claim_milestone(referrer, 15)

        assert result.message == "Please claim previous milestones first"
        assert await balance_of(referrer) == Decimal("0")

    @pytest.mark.asyncio
    async def test_target_not_reached(self, session, make_user, make_valid_referrals):
        """Four valid referrals are not enough for VIP1."""
        referrer = await make_user()
        await make_valid_referrals(referrer, 4)

        result = await MilestoneService(session).claim_milestone(referrer, 5)

        assert result.message == "Referral target not reached"

    @pytest.mark.asyncio
    async def test_invalid_target_and_user(self, session, make_user):
        """Unknown targets and users are rejected."""
        referrer = await make_user()
        service = MilestoneService(session)

        assert (await service.claim_milestone(referrer, 7)).message == "Invalid milestone"
        assert (await service.claim_milestone(999, 5)).message == "User not found"


class TestMilestoneStatus:
    """Test the ladder overview."""

    @pytest.mark.asyncio
    async def test_status_progression(self, session, make_user, make_valid_referrals):
        """Claiming VIP1 moves the claimable tier to VIP2."""
        referrer = await make_user()
        await make_valid_referrals(referrer, 16)
        service = MilestoneService(session)

        before = await service.get_milestone_status(referrer)
        await service.claim_milestone(referrer, 5)
        after = await service.get_milestone_status(referrer)

        assert before.valid_referrals == 16
        assert [m.target for m in before.claimable] == [5]
        assert before.next_target == 30
        statuses = {m.target: m.status for m in after.milestones}
        assert statuses[5] is MilestoneStatus.CLAIMED
        assert statuses[15] is MilestoneStatus.CLAIMABLE
