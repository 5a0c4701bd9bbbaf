"""
Plan purchase processing.

A purchase is a sequence of committed steps:

    (a)+(b) debit the price and record an Investment transaction
    (c)     create the purchased product               (STRICT, refunded on failure)
    (d)     allocate an inventory unit for limited plans (BEST_EFFORT)
    (e)     create the daily product task                (BEST_EFFORT)

Steps (d) and (e) never undo (a)-(c): the buyer keeps the product and
the failures come back as warnings.
"""

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config.plans import PlanConfig, get_plan
from ledger.models.enums import ProductStatus, TransactionType
from ledger.repositories.purchased_product_repository import (
    PurchasedProductRepository,
)
from ledger.repositories.user_repository import UserRepository
from ledger.services.base_service import BaseService, ServiceResult
from ledger.services.inventory_service import InventoryManager
from ledger.services.ledger.balance_ledger import BalanceLedger
from ledger.services.product.task_service import ProductTaskService
from ledger.utils.datetime_utils import add_days, ensure_aware, utc_now
from ledger.utils.exceptions import InsufficientBalanceError
from ledger.utils.failure_policy import FailurePolicy, run_step


class PurchaseProcessor(BaseService):
    """Buys plans on behalf of users."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize purchase processor.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.product_repo = PurchasedProductRepository(session)
        self.balance_ledger = BalanceLedger(session)
        self.inventory = InventoryManager(session)
        self.task_service = ProductTaskService(session)

    async def purchase(
        self, user_id: int, plan_id: str, now: datetime | None = None
    ) -> ServiceResult:
        """
        Purchase a plan.

        Args:
            user_id: Buyer
            plan_id: Plan id from the catalog
            now: Purchase time (defaults to current UTC time)

        Returns:
            ServiceResult with the new product ID in ``data`` and any
            post-purchase bookkeeping failures in ``warnings``
        """
        now = ensure_aware(now) if now else utc_now()

        plan = get_plan(plan_id)
        if plan is None:
            return ServiceResult.fail("Plan not found")

        inventory_type = plan.inventory_type
        if inventory_type is not None:
            await self.inventory.initialize()
            if not await self.inventory.is_available(plan.id, inventory_type):
                return ServiceResult.fail("This product is currently sold out")

        balance = await self.user_repo.get_balance(user_id)
        if balance is None:
            return ServiceResult.fail("User not found")
        if balance < plan.price:
            return ServiceResult.fail("Insufficient balance")

        log_extra = {"user_id": user_id, "plan_id": plan.id}

        # (a) + (b)
        try:
            await run_step(
                self.session,
                "debit",
                FailurePolicy.STRICT,
                lambda: self.balance_ledger.debit(
                    user_id,
                    plan.price,
                    TransactionType.INVESTMENT,
                    f"Investment in {plan.name}",
                ),
                context=log_extra,
            )
        except InsufficientBalanceError:
            return ServiceResult.fail("Insufficient balance")

        # (c)
        try:
            outcome = await run_step(
                self.session,
                "create_product",
                FailurePolicy.STRICT,
                lambda: self._create_product(user_id, plan, now),
                context=log_extra,
            )
        except SQLAlchemyError:
            await self._refund(user_id, plan)
            return ServiceResult.fail(
                "Failed to save product. Your balance has been refunded."
            )
        product_id: int = outcome.value

        warnings: list[str] = []

        # (d)
        if inventory_type is not None:
            outcome = await run_step(
                self.session,
                "inventory_increment",
                FailurePolicy.BEST_EFFORT,
                lambda: self.inventory.increase_purchased_count(plan.id, inventory_type),
                context=log_extra,
            )
            if not outcome.ok or not outcome.value:
                warnings.append("Failed to update product availability")

        # (e)
        outcome = await run_step(
            self.session,
            "create_task",
            FailurePolicy.BEST_EFFORT,
            lambda: self.task_service.create_for_product(user_id, product_id, plan),
            context=log_extra,
        )
        if not outcome.ok:
            warnings.append("Daily task creation failed")

        self.logger.info(
            "Plan purchased",
            extra={
                **log_extra,
                "product_id": product_id,
                "price": str(plan.price),
                "warnings": len(warnings),
            },
        )

        return ServiceResult.ok(
            f"You have invested in {plan.name}.",
            data=product_id,
            warnings=warnings,
        )

    async def _create_product(
        self, user_id: int, plan: PlanConfig, now: datetime
    ) -> int:
        product = await self.product_repo.create(
            user_id=user_id,
            plan_id=plan.id,
            name=plan.name,
            plan_type=plan.plan_type.value,
            price=plan.price,
            daily_roi=plan.daily_roi,
            daily_earning=plan.daily_income,
            total_earning=plan.total_return,
            cycle_days=plan.cycle_days,
            start_date=now,
            end_date=add_days(now, plan.cycle_days),
            status=ProductStatus.ACTIVE.value,
        )
        return product.id

    async def _refund(self, user_id: int, plan: PlanConfig) -> None:
        await run_step(
            self.session,
            "refund",
            FailurePolicy.STRICT,
            lambda: self.balance_ledger.credit(
                user_id,
                plan.price,
                TransactionType.INVESTMENT,
                f"Refund for failed investment in {plan.name}",
            ),
            context={"user_id": user_id, "plan_id": plan.id},
        )
        self.logger.warning(
            "Purchase refunded after product creation failure",
            extra={"user_id": user_id, "plan_id": plan.id},
        )
