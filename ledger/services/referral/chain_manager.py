"""
Referral chain management module.

Resolves a user's referrer ancestry by following ``referred_by`` links
one level at a time.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.user import User
from ledger.repositories.user_repository import UserRepository
from ledger.services.referral.config import REFERRAL_DEPTH


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_ancestor_ids(
        self, user_id: int, depth: int = REFERRAL_DEPTH
    ) -> list[tuple[int, int]]:
        """
        Walk up the referral chain.

        ``referred_by`` links are expected to form a forest but nothing
        forbids a cycle, so the walk stops at the first repeated user.

        Args:
            user_id: Starting user
            depth: Maximum number of levels

        Returns:
            List of ``(level, referrer_id)`` from direct referrer upwards
        """
        chain: list[tuple[int, int]] = []
        visited = {user_id}
        current = user_id

        for level in range(1, depth + 1):
            referrer_id = await self.user_repo.get_referrer_id(current)
            if referrer_id is None:
                break
            if referrer_id in visited:
                logger.warning(
                    "Referral cycle detected",
                    extra={
                        "user_id": user_id,
                        "level": level,
                        "referrer_id": referrer_id,
                        "chain": [rid for _, rid in chain],
                    },
                )
                break
            visited.add(referrer_id)
            chain.append((level, referrer_id))
            current = referrer_id

        logger.debug(
            "Referral chain retrieved",
            extra={"user_id": user_id, "depth": depth, "chain_length": len(chain)},
        )
        return chain

    async def get_referral_chain(
        self, user_id: int, depth: int = REFERRAL_DEPTH
    ) -> list[User]:
        """
        Get referrer users from direct referrer upwards.

        Args:
            user_id: Starting user
            depth: Maximum number of levels

        Returns:
            List of existing referrer users ordered by level
        """
        chain = []
        for _, referrer_id in await self.get_ancestor_ids(user_id, depth):
            referrer = await self.user_repo.get_by_id(referrer_id)
            if referrer is not None:
                chain.append(referrer)
        return chain

