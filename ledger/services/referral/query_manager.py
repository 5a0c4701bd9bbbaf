"""
Referral query management module.

Read-only views over the referral graph. The graph is implicit in
``users.referred_by``; each level is one query over the previous level's
user IDs.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.enums import TransactionType
from ledger.models.user import User
from ledger.repositories.transaction_repository import TransactionRepository
from ledger.repositories.user_repository import UserRepository
from ledger.services.referral.config import REFERRAL_DEPTH


@dataclass
class ReferralDetails:
    """Summary of a referrer's direct referrals."""

    referrals: list[User] = field(default_factory=list)
    total_referrals: int = 0
    total_earnings: Decimal = Decimal("0")
    referrals_with_deposits: int = 0
    referrals_without_deposits: int = 0


class ReferralQueryManager:
    """Manages referral query operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize query manager."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)

    async def get_direct_referrals(self, user_id: int) -> list[User]:
        """
        Users referred directly by ``user_id``.

        Args:
            user_id: Referrer user ID

        Returns:
            Direct referrals
        """
        return await self.user_repo.find_direct_referrals(user_id)

    async def get_referral_tree(
        self, user_id: int, depth: int = REFERRAL_DEPTH
    ) -> dict[int, list[User]]:
        """
        Referrals by level.

        Args:
            user_id: Root user ID
            depth: Number of levels

        Returns:
            Mapping of level (1..depth) to users at that level
        """
        tree: dict[int, list[User]] = {}
        seen = {user_id}
        parents = [user_id]

        for level in range(1, depth + 1):
            children = [
                user
                for user in await self.user_repo.find_referrals_of(parents)
                if user.id not in seen
            ]
            tree[level] = children
            seen.update(user.id for user in children)
            parents = [user.id for user in children]

        return tree

    async def get_referral_details(self, user_id: int) -> ReferralDetails:
        """
        Direct referral statistics with earnings from the transaction log.

        Args:
            user_id: Referrer user ID

        Returns:
            ReferralDetails
        """
        referrals = await self.get_direct_referrals(user_id)
        with_deposits = sum(1 for user in referrals if user.has_deposited)
        total_earnings = await self.transaction_repo.sum_completed(
            user_id, TransactionType.REFERRAL_BONUS
        )

        return ReferralDetails(
            referrals=referrals,
            total_referrals=len(referrals),
            total_earnings=total_earnings,
            referrals_with_deposits=with_deposits,
            referrals_without_deposits=len(referrals) - with_deposits,
        )
