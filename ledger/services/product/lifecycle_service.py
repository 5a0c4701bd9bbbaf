"""
Product lifecycle service.

Moves purchased products through Active -> Completed and applies
payouts. Every per-product change is committed on its own so that one
bad product never blocks the rest of a sweep, and every status or
payout change is a guarded UPDATE so that concurrent sweeps and manual
claims never pay twice.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config.settings import settings
from ledger.models.enums import PlanType, TransactionType
from ledger.models.purchased_product import PurchasedProduct
from ledger.repositories.product_claim_repository import ProductClaimRepository
from ledger.repositories.purchased_product_repository import (
    PurchasedProductRepository,
)
from ledger.services.base_service import BaseService, ServiceResult, log_operation
from ledger.services.ledger.balance_ledger import BalanceLedger
from ledger.services.product.payout_rules import (
    daily_payout_due,
    final_payout_amount,
    is_expired,
    pays_daily,
    payout_cutoff,
)
from ledger.utils.datetime_utils import date_key, ensure_aware, utc_now
from ledger.utils.failure_policy import FailurePolicy, run_step


@dataclass
class SweepResult:
    """Outcome of one sweep."""

    processed: int = 0
    skipped: int = 0
    failed: int = 0
    total_amount: Decimal = Decimal("0")
    product_ids: list[int] = field(default_factory=list)
    failed_ids: list[int] = field(default_factory=list)


class ProductLifecycleService(BaseService):
    """Payout and expiry logic for purchased products."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize lifecycle service.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.product_repo = PurchasedProductRepository(session)
        self.claim_repo = ProductClaimRepository(session)
        self.balance_ledger = BalanceLedger(session)

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    async def sweep_expirations(self, now: datetime | None = None) -> SweepResult:
        """
        Complete every Active product whose end date has passed.

        Basic and Premium products pay ``total_earning``; Special products
        pay back ``price`` (their profit was paid daily).

        Args:
            now: Sweep time (defaults to current UTC time)

        Returns:
            SweepResult
        """
        now = ensure_aware(now) if now else utc_now()
        result = SweepResult()

        product_ids = await self.product_repo.find_expired_active_ids(now)
        self.logger.info(
            "Expiration sweep started",
            extra={"candidates": len(product_ids), "now": now.isoformat()},
        )

        for product_id in product_ids:
            outcome = await run_step(
                self.session,
                "expire_product",
                FailurePolicy.BEST_EFFORT,
                lambda: self._expire_product(product_id, now),
                context={"product_id": product_id},
            )
            self._tally(result, product_id, outcome.ok, outcome.value)

        self.logger.info(
            "Expiration sweep finished",
            extra={
                "completed": result.processed,
                "failed": result.failed,
                "total_amount": str(result.total_amount),
            },
        )
        return result

    async def _expire_product(self, product_id: int, now: datetime) -> Decimal | None:
        product = await self.product_repo.get_by_id(product_id, fresh=True)
        if product is None or not product.is_active:
            return None
        if not is_expired(product.end_date, now):
            return None

        user_id = product.user_id
        name = product.name
        amount = final_payout_amount(
            product.plan_type, product.price, product.total_earning
        )

        if not await self.product_repo.complete_if_active(product_id, now):
            self.logger.debug(
                "Product completed concurrently, skipping",
                extra={"product_id": product_id},
            )
            return None

        await self.balance_ledger.credit(
            user_id,
            amount,
            TransactionType.INVESTMENT,
            f"Plan completion payout from {name}",
        )
        await self.product_repo.add_earned(product_id, amount)

        self.logger.debug(
            "Product completed",
            extra={"product_id": product_id, "user_id": user_id, "amount": str(amount)},
        )
        return amount

    # ------------------------------------------------------------------
    # Daily payouts
    # ------------------------------------------------------------------

    async def sweep_daily_payouts(self, now: datetime | None = None) -> SweepResult:
        """
        Pay one day of profit to running Special products.

        Every running product whose last payout (or start) is at least
        one day old gets its ``last_payout_date`` moved to ``now``;
        only Special products are credited ``daily_earning``, the others
        accrue until maturity. Missed days are not back-filled.

        Args:
            now: Sweep time (defaults to current UTC time)

        Returns:
            SweepResult (``processed`` counts credited products)
        """
        now = ensure_aware(now) if now else utc_now()
        result = SweepResult()

        after_id = 0
        while True:
            product_ids = await self._running_page(now, after_id)
            if not product_ids:
                break
            after_id = product_ids[-1]

            for product_id in product_ids:
                outcome = await run_step(
                    self.session,
                    "daily_payout",
                    FailurePolicy.BEST_EFFORT,
                    lambda: self._pay_daily(product_id, now),
                    context={"product_id": product_id},
                )
                self._tally(result, product_id, outcome.ok, outcome.value)

        self.logger.info(
            "Daily payout sweep finished",
            extra={
                "paid": result.processed,
                "failed": result.failed,
                "total_amount": str(result.total_amount),
            },
        )
        return result

    async def _running_page(self, now: datetime, after_id: int) -> list[int]:
        return await self.product_repo.find_running_ids(
            now, after_id=after_id, limit=settings.payout_batch_size
        )

    async def _pay_daily(self, product_id: int, now: datetime) -> Decimal | None:
        product = await self.product_repo.get_by_id(product_id, fresh=True)
        if product is None or not product.is_active:
            return None
        if not daily_payout_due(
            product.start_date, product.last_payout_date, product.end_date, now
        ):
            return None

        user_id = product.user_id
        name = product.name
        plan_type = product.plan_type
        amount = product.daily_earning

        if not await self.product_repo.mark_daily_payout(
            product_id, now, payout_cutoff(now)
        ):
            return None

        if not pays_daily(plan_type):
            # Basic and Premium accrue until maturity
            return None

        await self.balance_ledger.credit(
            user_id,
            amount,
            TransactionType.INVESTMENT,
            f"Daily payout from {name}",
        )
        await self.product_repo.add_earned(product_id, amount)
        await self.claim_repo.create(
            user_id=user_id,
            product_id=product_id,
            amount=amount,
            date_key=date_key(now),
            claim_date=now,
        )

        self.logger.debug(
            "Daily payout credited",
            extra={"product_id": product_id, "user_id": user_id, "amount": str(amount)},
        )
        return amount

    @staticmethod
    def _tally(
        result: SweepResult, product_id: int, ok: bool, amount: Decimal | None
    ) -> None:
        if not ok:
            result.failed += 1
            result.failed_ids.append(product_id)
        elif amount is None:
            result.skipped += 1
        else:
            result.processed += 1
            result.total_amount += amount
            result.product_ids.append(product_id)

    @log_operation
    async def process_daily_payouts(self, now: datetime | None = None) -> dict:
        """
        Run the expiry sweep, then the daily payout sweep.

        Args:
            now: Sweep time (defaults to current UTC time)

        Returns:
            Summary with ``completed``, ``paid``, ``failed`` and
            ``total_amount``
        """
        now = ensure_aware(now) if now else utc_now()

        expired = await self.sweep_expirations(now)
        daily = await self.sweep_daily_payouts(now)

        return {
            "completed": expired.processed,
            "paid": daily.processed,
            "failed": expired.failed + daily.failed,
            "total_amount": expired.total_amount + daily.total_amount,
        }

    # ------------------------------------------------------------------
    # Manual claim
    # ------------------------------------------------------------------

    async def claim_returns(
        self, user_id: int, product_id: int, now: datetime | None = None
    ) -> ServiceResult:
        """
        Claim a matured product by hand.

        Shares the final-payout rule and the Active -> Completed guard
        with the expiry sweep: whichever runs first pays, the other sees
        the product completed.

        Args:
            user_id: Requesting user
            product_id: Product to claim
            now: Claim time (defaults to current UTC time)

        Returns:
            ServiceResult with the credited amount in ``data``
        """
        now = ensure_aware(now) if now else utc_now()

        product = await self.product_repo.get_by_id(product_id, fresh=True)
        if product is None:
            return ServiceResult.fail("Product not found")
        if product.user_id != user_id:
            return ServiceResult.fail("Unauthorized access")
        if not is_expired(product.end_date, now):
            return ServiceResult.fail("Cycle has not ended yet")
        if not product.is_active:
            return ServiceResult.fail("Returns have already been claimed")

        name = product.name
        amount = final_payout_amount(
            product.plan_type, product.price, product.total_earning
        )

        try:
            if not await self.product_repo.complete_if_active(product_id, now):
                await self.rollback()
                return ServiceResult.fail("Returns have already been claimed")

            await self.balance_ledger.credit(
                user_id,
                amount,
                TransactionType.INVESTMENT,
                f"Returns claimed for {name}",
            )
            await self.product_repo.add_earned(product_id, amount)
            await self.commit()
        except Exception:
            await self.rollback()
            self.logger.error(
                "Failed to claim returns",
                extra={"user_id": user_id, "product_id": product_id},
                exc_info=True,
            )
            raise

        self.logger.info(
            "Returns claimed",
            extra={"user_id": user_id, "product_id": product_id, "amount": str(amount)},
        )
        return ServiceResult.ok(
            f"Successfully claimed {amount:,.0f} returns for {name}!",
            data=amount,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_user_products(self, user_id: int) -> list[PurchasedProduct]:
        """All products of a user, newest first; empty on store errors."""
        try:
            return await self.product_repo.get_user_products(user_id)
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to load products: {}",
                e,
                extra={"user_id": user_id},
                exc_info=True,
            )
            return []

    async def get_user_active_products(
        self, user_id: int, now: datetime | None = None
    ) -> list[PurchasedProduct]:
        """Active, unexpired products of a user."""
        return await self.product_repo.get_user_active_products(
            user_id, ensure_aware(now) if now else utc_now()
        )

    async def can_access_special_plans(self, user_id: int) -> bool:
        """Special and Premium plans unlock once the user owns an Active Basic plan."""
        try:
            return await self.product_repo.has_active_plan_type(user_id, PlanType.BASIC)
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to check plan access: {}",
                e,
                extra={"user_id": user_id},
                exc_info=True,
            )
            return False

    async def has_claimed_today(
        self, user_id: int, product_id: int, now: datetime | None = None
    ) -> bool:
        """Check for today's daily claim record of a product."""
        return await self.claim_repo.has_claim(
            user_id, product_id, date_key(now or utc_now())
        )
