"""
Purchased product repository.

Status and payout changes go through guarded UPDATEs so that the
expiry sweep, the daily sweep and manual claims never act twice on the
same product.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import PlanType, ProductStatus
from ledger.models.purchased_product import PurchasedProduct
from ledger.models.types import UTCDateTime
from ledger.repositories.base import BaseRepository


class PurchasedProductRepository(BaseRepository[PurchasedProduct]):
    """Purchased product repository with lifecycle queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize purchased product repository."""
        super().__init__(PurchasedProduct, session)

    async def get_user_products(self, user_id: int) -> list[PurchasedProduct]:
        """
        Get all products of a user, newest first.

        Args:
            user_id: Owner user ID

        Returns:
            List of products
        """
        stmt = (
            select(PurchasedProduct)
            .where(PurchasedProduct.user_id == user_id)
            .order_by(PurchasedProduct.start_date.desc(), PurchasedProduct.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_active_products(
        self, user_id: int, now: datetime
    ) -> list[PurchasedProduct]:
        """
        Get a user's Active products that have not reached their end date.

        Args:
            user_id: Owner user ID
            now: Reference time

        Returns:
            List of running products
        """
        stmt = (
            select(PurchasedProduct)
            .where(
                PurchasedProduct.user_id == user_id,
                PurchasedProduct.status == ProductStatus.ACTIVE.value,
                PurchasedProduct.end_date > now,
            )
            .order_by(PurchasedProduct.start_date.desc(), PurchasedProduct.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_active_plan_type(self, user_id: int, plan_type: PlanType) -> bool:
        """Check whether a user owns an Active product of ``plan_type``."""
        stmt = (
            select(func.count(PurchasedProduct.id))
            .where(
                PurchasedProduct.user_id == user_id,
                PurchasedProduct.plan_type == plan_type.value,
                PurchasedProduct.status == ProductStatus.ACTIVE.value,
            )
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def find_expired_active_ids(
        self, now: datetime, limit: int | None = None
    ) -> list[int]:
        """
        IDs of Active products whose end date has passed.

        Args:
            now: Reference time
            limit: Max results

        Returns:
            Product IDs, oldest end date first
        """
        stmt = (
            select(PurchasedProduct.id)
            .where(
                PurchasedProduct.status == ProductStatus.ACTIVE.value,
                PurchasedProduct.end_date <= now,
            )
            .order_by(PurchasedProduct.end_date, PurchasedProduct.id)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_running_ids(
        self, now: datetime, after_id: int = 0, limit: int | None = None
    ) -> list[int]:
        """IDs of Active products that have not expired yet, keyset-paged by ID."""
        stmt = (
            select(PurchasedProduct.id)
            .where(
                PurchasedProduct.status == ProductStatus.ACTIVE.value,
                PurchasedProduct.end_date > now,
                PurchasedProduct.id > after_id,
            )
            .order_by(PurchasedProduct.id)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def complete_if_active(self, product_id: int, now: datetime) -> bool:
        """
        Transition Active -> Completed.

        The ``status = Active`` guard is the mutual-exclusion flag between
        the expiry sweep and manual claims.

        Returns:
            True only for the caller that performed the transition
        """
        stmt = (
            update(PurchasedProduct)
            .where(
                PurchasedProduct.id == product_id,
                PurchasedProduct.status == ProductStatus.ACTIVE.value,
            )
            .values(status=ProductStatus.COMPLETED.value, completed_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_daily_payout(
        self, product_id: int, now: datetime, cutoff: datetime
    ) -> bool:
        """
        Set ``last_payout_date = now`` if the previous payout (or the start
        date) is at or before ``cutoff`` and the product is still running.

        Args:
            product_id: Product ID
            now: Payout time
            cutoff: ``now`` minus the payout interval

        Returns:
            True if the payout slot was taken by this call
        """
        last_paid = func.coalesce(
            PurchasedProduct.last_payout_date,
            PurchasedProduct.start_date,
            type_=UTCDateTime,
        )
        stmt = (
            update(PurchasedProduct)
            .where(
                PurchasedProduct.id == product_id,
                PurchasedProduct.status == ProductStatus.ACTIVE.value,
                PurchasedProduct.end_date > now,
                last_paid <= cutoff,
            )
            .values(last_payout_date=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def add_earned(self, product_id: int, amount: Decimal) -> None:
        """Increase the product's paid-out counter."""
        stmt = (
            update(PurchasedProduct)
            .where(PurchasedProduct.id == product_id)
            .values(total_earned=PurchasedProduct.total_earned + amount)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
