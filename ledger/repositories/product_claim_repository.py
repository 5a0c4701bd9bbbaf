"""
Daily product claim repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.product_claim import ProductClaim
from ledger.repositories.base import BaseRepository


class ProductClaimRepository(BaseRepository[ProductClaim]):
    """Daily claim records keyed by (product, date)."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize product claim repository."""
        super().__init__(ProductClaim, session)

    async def has_claim(self, user_id: int, product_id: int, date_key: str) -> bool:
        """Check for a claim of ``product_id`` on ``date_key``."""
        return await self.exists(
            user_id=user_id, product_id=product_id, date_key=date_key
        )

    async def get_product_claims(self, product_id: int) -> list[ProductClaim]:
        """All daily claims of a product, oldest first."""
        return await self.find_by(product_id=product_id)
