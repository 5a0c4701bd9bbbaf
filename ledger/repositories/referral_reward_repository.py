"""
Referral milestone reward repository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import MilestoneClaimStatus
from ledger.models.referral_reward import ReferralReward
from ledger.repositories.base import BaseRepository


class ReferralRewardRepository(BaseRepository[ReferralReward]):
    """Milestone claim repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral reward repository."""
        super().__init__(ReferralReward, session)

    async def get_claimed_targets(self, user_id: int) -> set[int]:
        """
        Targets the user has already claimed.

        Args:
            user_id: Referrer user ID

        Returns:
            Set of milestone targets
        """
        stmt = select(ReferralReward.milestone_target).where(
            ReferralReward.user_id == user_id,
            ReferralReward.status == MilestoneClaimStatus.CLAIMED.value,
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def is_claimed(self, user_id: int, target: int) -> bool:
        """Check for a claimed record for (user, target)."""
        return await self.exists(
            user_id=user_id,
            milestone_target=target,
            status=MilestoneClaimStatus.CLAIMED.value,
        )
