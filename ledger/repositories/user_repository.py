"""
User repository.

Data access layer for User model. Every balance mutation is a single
guarded UPDATE; callers read ``rowcount`` (or the returned balance) to
learn whether it applied.
"""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.purchased_product import PurchasedProduct
from ledger.models.user import User
from ledger.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email.

        Args:
            email: Email address

        Returns:
            User or None
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_referral_code(self, referral_code: str) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Unique referral code

        Returns:
            User or None
        """
        stmt = select(User).where(User.referral_code == referral_code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def referral_code_exists(self, referral_code: str) -> bool:
        """Check whether a referral code is taken."""
        return await self.exists(referral_code=referral_code)

    async def find_without_referral_code(self) -> list[User]:
        """Users registered before referral codes were issued."""
        stmt = select(User).where(User.referral_code.is_(None)).order_by(User.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_direct_referrals(self, referrer_id: int) -> list[User]:
        """
        Users whose ``referred_by`` points at ``referrer_id``.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Direct referrals, oldest first
        """
        stmt = (
            select(User)
            .where(User.referred_by == referrer_id)
            .order_by(User.created_at, User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_referrals_of(self, referrer_ids: Sequence[int]) -> list[User]:
        """Users referred by any of ``referrer_ids``."""
        if not referrer_ids:
            return []
        stmt = (
            select(User)
            .where(User.referred_by.in_(list(referrer_ids)))
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_referrer_id(self, user_id: int) -> int | None:
        """Return ``referred_by`` of a user without loading the row."""
        stmt = select(User.referred_by).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_balance(self, user_id: int) -> Decimal | None:
        """
        Read the current balance straight from the store.

        Args:
            user_id: User ID

        Returns:
            Balance or None if the user does not exist
        """
        stmt = select(User.balance).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_balance(
        self,
        user_id: int,
        amount: Decimal,
        **counters: Decimal,
    ) -> Decimal | None:
        """
        Atomically add ``amount`` to the balance.

        Args:
            user_id: User ID
            amount: Amount to add (positive)
            **counters: Extra money columns to increment by the given
                deltas (e.g. ``referral_earnings=amount``)

        Returns:
            Balance after the update, or None if the user does not exist
        """
        values = {"balance": User.balance + amount}
        for column, delta in counters.items():
            values[column] = getattr(User, column) + delta

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(**values)
            .returning(User.balance)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def decrement_balance_if_sufficient(
        self,
        user_id: int,
        amount: Decimal,
        **counters: Decimal,
    ) -> Decimal | None:
        """
        Atomically subtract ``amount`` only while ``balance >= amount``.

        Args:
            user_id: User ID
            amount: Amount to subtract (positive)
            **counters: Extra money columns to increment by the given deltas

        Returns:
            Balance after the debit, or None if the balance was too low
            or the user does not exist
        """
        values = {"balance": User.balance - amount}
        for column, delta in counters.items():
            values[column] = getattr(User, column) + delta

        stmt = (
            update(User)
            .where(User.id == user_id, User.balance >= amount)
            .values(**values)
            .returning(User.balance)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_first_deposit(self, user_id: int, when: datetime) -> bool:
        """
        Flip ``has_deposited`` from false to true.

        Returns:
            True only for the call that performed the flip
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.has_deposited.is_(False))
            .values(has_deposited=True, first_deposit_date=when)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def try_check_in(
        self, user_id: int, now: datetime, not_after: datetime
    ) -> bool:
        """
        Record a check-in if the previous one is at or before ``not_after``.

        Args:
            user_id: User ID
            now: Check-in time
            not_after: Latest allowed previous check-in

        Returns:
            True if the check-in was recorded
        """
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.has_deposited.is_(True),
                (User.last_check_in.is_(None)) | (User.last_check_in <= not_after),
            )
            .values(last_check_in=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def increment_total_referrals(self, user_id: int) -> None:
        """Bump the advisory direct-referral counter."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(total_referrals=User.total_referrals + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def count_valid_referrals(self, referrer_id: int) -> int:
        """
        Count direct referrals that have deposited and own at least one
        purchased product.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Number of valid referrals
        """
        owns_product = (
            select(PurchasedProduct.id)
            .where(PurchasedProduct.user_id == User.id)
            .exists()
        )
        stmt = select(func.count(User.id)).where(
            User.referred_by == referrer_id,
            User.has_deposited.is_(True),
            owns_product,
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0
