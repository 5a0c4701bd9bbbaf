"""
Referral milestone service.

Counts valid referrals, reports ladder status and pays milestone
rewards. Claims are re-validated server-side; the unique
(user, target) constraint on claim records is the final guard against
double claims.
"""

from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config.milestones import get_tier
from ledger.models.enums import MilestoneClaimStatus, TransactionType
from ledger.repositories.referral_reward_repository import (
    ReferralRewardRepository,
)
from ledger.repositories.user_repository import UserRepository
from ledger.services.base_service import BaseService, ServiceResult
from ledger.services.ledger.balance_ledger import BalanceLedger
from ledger.services.milestone.ladder import (
    MilestoneOverview,
    claim_error,
    evaluate_ladder,
)
from ledger.utils.datetime_utils import ensure_aware, utc_now


class MilestoneService(BaseService):
    """Referral milestone ladder."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize milestone service.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.reward_repo = ReferralRewardRepository(session)
        self.balance_ledger = BalanceLedger(session)

    async def get_valid_referral_count(self, user_id: int) -> int:
        """
        Count direct referrals that deposited and invested.

        Args:
            user_id: Referrer user ID

        Returns:
            Valid referral count, 0 on store errors
        """
        try:
            return await self.user_repo.count_valid_referrals(user_id)
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to count valid referrals: {}",
                e,
                extra={"user_id": user_id},
                exc_info=True,
            )
            return 0

    async def get_milestone_status(self, user_id: int) -> MilestoneOverview:
        """
        Status of every ladder tier for a user.

        Args:
            user_id: Referrer user ID

        Returns:
            MilestoneOverview; an empty overview on store errors
        """
        try:
            valid_referrals = await self.user_repo.count_valid_referrals(user_id)
            claimed = await self.reward_repo.get_claimed_targets(user_id)
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to load milestone status: {}",
                e,
                extra={"user_id": user_id},
                exc_info=True,
            )
            return MilestoneOverview(valid_referrals=0, milestones=(), next_target=None)

        return evaluate_ladder(valid_referrals, claimed)

    async def claim_milestone(
        self, user_id: int, target: int, now: datetime | None = None
    ) -> ServiceResult:
        """
        Claim the reward of one tier.

        Args:
            user_id: Referrer user ID
            target: Tier target
            now: Claim time (defaults to current UTC time)

        Returns:
            ServiceResult with the reward in ``data``
        """
        now = ensure_aware(now) if now else utc_now()

        tier = get_tier(target)
        if tier is None:
            return ServiceResult.fail("Invalid milestone")

        if await self.user_repo.get_balance(user_id) is None:
            return ServiceResult.fail("User not found")

        valid_referrals = await self.user_repo.count_valid_referrals(user_id)
        claimed = await self.reward_repo.get_claimed_targets(user_id)

        error = claim_error(target, valid_referrals, claimed)
        if error:
            return ServiceResult.fail(error)

        log_extra = {"user_id": user_id, "target": target, "reward": str(tier.reward)}

        try:
            await self.reward_repo.create(
                user_id=user_id,
                milestone_target=target,
                amount=tier.reward,
                status=MilestoneClaimStatus.CLAIMED.value,
                claimed_at=now,
            )
            await self.balance_ledger.credit(
                user_id,
                tier.reward,
                TransactionType.REFERRAL_BONUS,
                f"Referral milestone reward for {target} valid users",
            )
            await self.commit()
        except IntegrityError:
            await self.rollback()
            self.logger.warning("Concurrent milestone claim rejected", extra=log_extra)
            return ServiceResult.fail("Milestone already claimed")
        except Exception:
            await self.rollback()
            self.logger.error("Failed to claim milestone", extra=log_extra, exc_info=True)
            raise

        self.logger.info("Milestone claimed", extra=log_extra)
        return ServiceResult.ok(
            f"Successfully claimed {tier.reward:,.0f} reward!",
            data=tier.reward,
        )
