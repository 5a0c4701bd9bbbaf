"""
Balance/transaction ledger.

Every payout, bonus, claim, deposit and purchase is expressed here as
one atomic balance UPDATE plus one immutable Transaction row. The
recorded balances come from the UPDATE itself (RETURNING). Neither
method commits: the caller owns the unit of work so that related writes
(product status, claim records) land in the same commit.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import TransactionStatus, TransactionType
from ledger.models.transaction import Transaction
from ledger.repositories.transaction_repository import TransactionRepository
from ledger.repositories.user_repository import UserRepository
from ledger.utils.exceptions import InsufficientBalanceError, UserNotFoundError
from ledger.utils.money import to_decimal


class BalanceLedger:
    """Atomic balance mutations paired with transaction records."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize balance ledger.

        Args:
            session: Database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)

    async def credit(
        self,
        user_id: int,
        amount: Decimal | int,
        transaction_type: TransactionType,
        description: str,
        *,
        referral_user_id: int | None = None,
        counters: dict[str, Decimal] | None = None,
    ) -> Transaction:
        """
        Add ``amount`` to a user's balance and record it.

        Args:
            user_id: Receiving user
            amount: Positive amount
            transaction_type: Transaction type to record
            description: Free-text description
            referral_user_id: Downstream user for referral bonuses
            counters: Extra money columns to bump, e.g. ``total_deposits``

        Returns:
            Created transaction

        Raises:
            ValueError: If amount is not positive
            UserNotFoundError: If the user does not exist
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {amount}")

        balance_after = await self.user_repo.increment_balance(
            user_id, amount, **(counters or {})
        )
        if balance_after is None:
            raise UserNotFoundError(user_id)

        record = await self.transaction_repo.create(
            user_id=user_id,
            type=transaction_type.value,
            amount=amount,
            status=TransactionStatus.COMPLETED.value,
            balance_before=balance_after - amount,
            balance_after=balance_after,
            description=description,
            referral_user_id=referral_user_id,
        )

        logger.debug(
            "Balance credited",
            extra={
                "user_id": user_id,
                "amount": str(amount),
                "type": transaction_type.value,
            },
        )
        return record

    async def debit(
        self,
        user_id: int,
        amount: Decimal | int,
        transaction_type: TransactionType,
        description: str,
        *,
        counters: dict[str, Decimal] | None = None,
    ) -> Transaction:
        """
        Subtract ``amount`` from a user's balance and record it.

        The subtraction is guarded by ``balance >= amount`` in the same
        statement, so concurrent debits can never overdraw.

        Args:
            user_id: Paying user
            amount: Positive amount
            transaction_type: Transaction type to record
            description: Free-text description
            counters: Extra money columns to bump

        Returns:
            Created transaction

        Raises:
            ValueError: If amount is not positive
            UserNotFoundError: If the user does not exist
            InsufficientBalanceError: If the balance is below ``amount``
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValueError(f"Debit amount must be positive, got {amount}")

        balance_after = await self.user_repo.decrement_balance_if_sufficient(
            user_id, amount, **(counters or {})
        )
        if balance_after is None:
            if await self.user_repo.get_balance(user_id) is None:
                raise UserNotFoundError(user_id)
            raise InsufficientBalanceError(user_id, amount)

        record = await self.transaction_repo.create(
            user_id=user_id,
            type=transaction_type.value,
            amount=amount,
            status=TransactionStatus.COMPLETED.value,
            balance_before=balance_after + amount,
            balance_after=balance_after,
            description=description,
        )

        logger.debug(
            "Balance debited",
            extra={
                "user_id": user_id,
                "amount": str(amount),
                "type": transaction_type.value,
            },
        )
        return record

    async def get_balance(self, user_id: int) -> Decimal:
        """Current balance, zero for unknown users."""
        balance = await self.user_repo.get_balance(user_id)
        return balance if balance is not None else Decimal("0")
