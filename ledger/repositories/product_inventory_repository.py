"""
Product inventory repository.

The purchased counter only moves through ``increment_if_available``
(one guarded UPDATE) or an administrative reset.
"""

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.models.product_inventory import ProductInventory
from ledger.repositories.base import BaseRepository


class ProductInventoryRepository(BaseRepository[ProductInventory]):
    """Inventory repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize inventory repository."""
        super().__init__(ProductInventory, session)

    async def get_record(
        self, product_type: str, product_id: str
    ) -> ProductInventory | None:
        """
        Get inventory record for one product, freshly read.

        Args:
            product_type: ``special`` or ``premium``
            product_id: Plan id

        Returns:
            Record or None
        """
        stmt = (
            select(ProductInventory)
            .where(
                ProductInventory.product_type == product_type,
                ProductInventory.product_id == product_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_type(self, product_type: str) -> list[ProductInventory]:
        """All records of one product type."""
        stmt = (
            select(ProductInventory)
            .where(ProductInventory.product_type == product_type)
            .order_by(ProductInventory.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def type_initialized(self, product_type: str) -> bool:
        """Check whether any record exists for a product type."""
        stmt = (
            select(func.count(ProductInventory.id))
            .where(ProductInventory.product_type == product_type)
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def increment_if_available(
        self, product_type: str, product_id: str
    ) -> bool:
        """
        Atomically add one purchase while ``purchased < total``.

        Returns:
            True if a unit was allocated
        """
        stmt = (
            update(ProductInventory)
            .where(
                ProductInventory.product_type == product_type,
                ProductInventory.product_id == product_id,
                ProductInventory.purchased < ProductInventory.total,
            )
            .values(purchased=ProductInventory.purchased + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def reset_type(self, product_type: str) -> int:
        """
        Reset ``purchased`` to zero for every product of a type.

        Returns:
            Number of records reset
        """
        stmt = (
            update(ProductInventory)
            .where(ProductInventory.product_type == product_type)
            .values(purchased=0)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete_type(self, product_type: str) -> None:
        """Remove all records of a type (used by force re-seeding)."""
        stmt = delete(ProductInventory).where(
            ProductInventory.product_type == product_type
        )
        await self.session.execute(stmt)
