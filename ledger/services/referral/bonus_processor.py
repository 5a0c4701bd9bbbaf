"""
Referral bonus processor.

Pays one-time referral bonuses when a referred user makes their first
deposit (multi-level) and, optionally, the legacy flat bonus at
registration.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import (
    AdminNotificationType,
    NotificationType,
    TransactionType,
)
from ledger.repositories.transaction_repository import TransactionRepository
from ledger.repositories.user_repository import UserRepository
from ledger.services.base_service import BaseService
from ledger.services.ledger.balance_ledger import BalanceLedger
from ledger.services.notification_service import NotificationService
from ledger.services.referral.chain_manager import ReferralChainManager
from ledger.services.referral.config import (
    LEGACY_REFERRAL_BONUS,
    REFERRAL_DEPTH,
    calculate_level_reward,
)
from ledger.utils.exceptions import PERSISTENCE_ERRORS
from ledger.utils.failure_policy import FailurePolicy, run_step
from ledger.utils.money import to_decimal


@dataclass
class BonusResult:
    """Result of referral bonus processing."""

    success: bool
    total_rewards: Decimal = Decimal("0")
    rewards_count: int = 0
    failed_levels: list[int] = field(default_factory=list)
    skipped_reason: str | None = None


class ReferralBonusProcessor(BaseService):
    """
    Referral bonus payouts.

    Deposit bonuses walk up to three referrer levels. Each level's
    balance credit and transaction are committed together and failures
    are isolated per level; notifications are best effort.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize referral bonus processor.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.chain_manager = ReferralChainManager(session)
        self.balance_ledger = BalanceLedger(session)
        self.notification_service = NotificationService(session)

    async def process_deposit_referral_bonus(
        self, user_id: int, deposit_amount: Decimal | int
    ) -> BonusResult:
        """
        Pay level-scaled bonuses for a user's first deposit.

        Callers gate on the first deposit; this method additionally
        refuses to pay when the direct referrer already holds a
        Referral_Bonus for this user, and skips any ancestor that was
        already paid (so retries after a partial failure only fill gaps).

        Args:
            user_id: User who deposited
            deposit_amount: Deposit amount

        Returns:
            BonusResult
        """
        deposit_amount = to_decimal(deposit_amount)

        chain = await self.chain_manager.get_ancestor_ids(user_id, REFERRAL_DEPTH)
        if not chain:
            self.logger.debug(
                "No referrer for user, skipping deposit bonus",
                extra={"user_id": user_id},
            )
            return BonusResult(success=True, skipped_reason="no_referrer")

        _, direct_referrer_id = chain[0]
        if await self.transaction_repo.referral_bonus_exists(
            direct_referrer_id, user_id
        ):
            self.logger.info(
                "Referral bonus already paid, skipping",
                extra={"user_id": user_id, "referrer_id": direct_referrer_id},
            )
            return BonusResult(success=True, skipped_reason="already_paid")

        result = BonusResult(success=True)

        for level, referrer_id in chain:
            bonus = calculate_level_reward(deposit_amount, level)
            if bonus <= 0:
                continue

            log_extra = {
                "user_id": user_id,
                "referrer_id": referrer_id,
                "level": level,
                "amount": str(bonus),
            }

            try:
                outcome = await run_step(
                    self.session,
                    f"referral_level_{level}",
                    FailurePolicy.STRICT,
                    lambda: self._pay_level(referrer_id, user_id, level, bonus),
                    context=log_extra,
                )
            except IntegrityError:
                # Another call paid this level first
                self.logger.info(
                    "Referral bonus paid concurrently, skipping", extra=log_extra
                )
                continue
            except PERSISTENCE_ERRORS:
                result.failed_levels.append(level)
                continue

            if not outcome.value:
                continue

            result.total_rewards += bonus
            result.rewards_count += 1
            self.logger.info("Referral deposit bonus paid", extra=log_extra)

            await run_step(
                self.session,
                f"referral_level_{level}_notification",
                FailurePolicy.BEST_EFFORT,
                lambda: self.notification_service.notify_user(
                    referrer_id,
                    f"You earned {bonus:,.0f} Level {level} referral bonus! "
                    f"Your referred user made their first deposit.",
                    NotificationType.REFERRAL,
                ),
                context=log_extra,
            )

        result.success = not result.failed_levels

        self.logger.info(
            "Referral deposit bonuses processed",
            extra={
                "user_id": user_id,
                "deposit_amount": str(deposit_amount),
                "total_rewards": str(result.total_rewards),
                "rewards_count": result.rewards_count,
                "failed_levels": result.failed_levels,
            },
        )
        return result

    async def _pay_level(
        self, referrer_id: int, user_id: int, level: int, bonus: Decimal
    ) -> bool:
        if await self.transaction_repo.referral_bonus_exists(referrer_id, user_id):
            return False

        await self.balance_ledger.credit(
            referrer_id,
            bonus,
            TransactionType.REFERRAL_BONUS,
            f"Level {level} referral bonus for first deposit",
            referral_user_id=user_id,
            counters={"referral_earnings": bonus},
        )
        return True

    async def process_referral_bonus(
        self, new_user_id: int, referrer_id: int
    ) -> BonusResult:
        """
        Pay the legacy flat bonus (24% of the welcome bonus) to a referrer.

        Every step is best effort: failures are logged and never reach
        the caller, so registration cannot fail because of this bonus.

        Args:
            new_user_id: Newly registered user
            referrer_id: Their referrer

        Returns:
            BonusResult (``success`` is False when the credit failed)
        """
        bonus = LEGACY_REFERRAL_BONUS
        log_extra = {
            "new_user_id": new_user_id,
            "referrer_id": referrer_id,
            "amount": str(bonus),
        }

        try:
            referrer = await self.user_repo.get_by_id(referrer_id)
            referrer_email = referrer.email if referrer else None
            already_paid = await self.transaction_repo.referral_bonus_exists(
                referrer_id, new_user_id
            )
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to load referrer for legacy bonus: {}",
                e,
                extra=log_extra,
                exc_info=True,
            )
            return BonusResult(success=False, skipped_reason="store_error")

        if referrer is None:
            self.logger.warning("Referrer not found for legacy bonus", extra=log_extra)
            return BonusResult(success=True, skipped_reason="no_referrer")
        if already_paid:
            return BonusResult(success=True, skipped_reason="already_paid")

        credited = await run_step(
            self.session,
            "legacy_bonus_credit",
            FailurePolicy.BEST_EFFORT,
            lambda: self.balance_ledger.credit(
                referrer_id,
                bonus,
                TransactionType.REFERRAL_BONUS,
                "Referral bonus for user's first deposit",
                referral_user_id=new_user_id,
                counters={"referral_earnings": bonus},
            ),
            context=log_extra,
        )

        if not credited.ok:
            if isinstance(credited.error, IntegrityError):
                return BonusResult(success=True, skipped_reason="already_paid")
            return BonusResult(success=False)

        await run_step(
            self.session,
            "legacy_bonus_notification",
            FailurePolicy.BEST_EFFORT,
            lambda: self.notification_service.notify_user(
                referrer_id,
                f"You earned {bonus:,.0f} referral bonus! "
                f"Your referred user made their first deposit.",
                NotificationType.REFERRAL,
            ),
            context=log_extra,
        )

        await run_step(
            self.session,
            "legacy_bonus_admin_notification",
            FailurePolicy.BEST_EFFORT,
            lambda: self.notification_service.notify_admins(
                f"Referral bonus paid: {bonus:,.0f} to {referrer_email} "
                f"for user's first deposit",
                AdminNotificationType.SYSTEM,
            ),
            context=log_extra,
        )

        self.logger.info("Legacy referral bonus paid", extra=log_extra)
        return BonusResult(success=True, total_rewards=bonus, rewards_count=1)
