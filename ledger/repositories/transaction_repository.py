"""
Transaction repository.

Append-only access to the transaction log.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import TransactionStatus, TransactionType
from ledger.models.transaction import Transaction
from ledger.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def get_user_transactions(
        self,
        user_id: int,
        transaction_type: TransactionType | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """
        Get a user's transactions, newest first.

        Args:
            user_id: User ID
            transaction_type: Optional type filter
            limit: Max results

        Returns:
            List of transactions
        """
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if transaction_type is not None:
            stmt = stmt.where(Transaction.type == transaction_type.value)
        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def referral_bonus_exists(
        self, referrer_id: int, referral_user_id: int
    ) -> bool:
        """
        Check if ``referrer_id`` was already paid a referral bonus
        triggered by ``referral_user_id``.

        Args:
            referrer_id: Bonus recipient
            referral_user_id: Downstream user who triggered the bonus

        Returns:
            True if such a Referral_Bonus transaction exists
        """
        stmt = (
            select(func.count(Transaction.id))
            .where(
                Transaction.user_id == referrer_id,
                Transaction.type == TransactionType.REFERRAL_BONUS.value,
                Transaction.referral_user_id == referral_user_id,
            )
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def sum_completed(
        self, user_id: int, transaction_type: TransactionType
    ) -> Decimal:
        """
        Sum completed transactions of one type.

        Args:
            user_id: User ID
            transaction_type: Transaction type

        Returns:
            Total amount (zero when none)
        """
        stmt = (
            select(func.coalesce(func.sum(Transaction.amount), 0))
            .where(
                Transaction.user_id == user_id,
                Transaction.type == transaction_type.value,
                Transaction.status == TransactionStatus.COMPLETED.value,
            )
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
