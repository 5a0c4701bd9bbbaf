"""
Inventory manager.

Tracks how many units of each inventory-limited plan were sold and
refuses to allocate more than the configured total. The persisted
quantity is the purchased count; availability is ``purchased < total``.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config.inventory import INVENTORY_SEEDS
from ledger.models.enums import InventoryType
from ledger.repositories.product_inventory_repository import (
    ProductInventoryRepository,
)
from ledger.services.base_service import BaseService
from ledger.utils.db_decorators import with_auto_commit


class InventoryManager(BaseService):
    """Inventory allocation for Special and Premium plans."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize inventory manager.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.inventory_repo = ProductInventoryRepository(session)

    async def initialize(self) -> dict[InventoryType, bool]:
        """
        Seed inventory records for every limited product type.

        Idempotent: a type that already has records is left untouched,
        including when a concurrent initializer wins the insert race.

        Returns:
            Mapping of type to whether this call seeded it
        """
        seeded: dict[InventoryType, bool] = {}
        for inventory_type in INVENTORY_SEEDS:
            seeded[inventory_type] = await self._initialize_type(inventory_type)
        return seeded

    async def _initialize_type(self, inventory_type: InventoryType) -> bool:
        if await self.inventory_repo.type_initialized(inventory_type.value):
            return False

        try:
            await self._seed_type(inventory_type)
            await self.commit()
        except IntegrityError:
            await self.rollback()
            self.logger.info(
                "Inventory already initialized concurrently",
                extra={"product_type": inventory_type.value},
            )
            return False

        self.logger.info(
            "Inventory initialized",
            extra={
                "product_type": inventory_type.value,
                "products": len(INVENTORY_SEEDS[inventory_type]),
            },
        )
        return True

    async def _seed_type(self, inventory_type: InventoryType) -> None:
        await self.inventory_repo.bulk_create([
            {
                "product_type": inventory_type.value,
                "product_id": seed.product_id,
                "name": seed.name,
                "purchased": 0,
                "total": seed.total,
            }
            for seed in INVENTORY_SEEDS[inventory_type]
        ])

    async def is_available(
        self, product_id: str, inventory_type: InventoryType
    ) -> bool:
        """
        Check whether at least one unit is left.

        Args:
            product_id: Plan id
            inventory_type: ``special`` or ``premium``

        Returns:
            True if ``purchased < total``; False when the record is
            missing or the store cannot be read
        """
        try:
            record = await self.inventory_repo.get_record(
                inventory_type.value, product_id
            )
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to read inventory: {}",
                e,
                extra={"product_id": product_id, "product_type": inventory_type.value},
                exc_info=True,
            )
            return False

        if record is None:
            return False
        return record.purchased < record.total

    @with_auto_commit
    async def increase_purchased_count(
        self, product_id: str, inventory_type: InventoryType
    ) -> bool:
        """
        Allocate one unit.

        A single guarded UPDATE increments ``purchased`` only while it is
        below ``total``, so concurrent buyers can never oversell.

        Args:
            product_id: Plan id
            inventory_type: ``special`` or ``premium``

        Returns:
            True if a unit was allocated, False if sold out or unknown
        """
        await self.initialize()

        allocated = await self.inventory_repo.increment_if_available(
            inventory_type.value, product_id
        )
        if not allocated:
            self.logger.warning(
                "Inventory increment refused: sold out or unknown product",
                extra={"product_id": product_id, "product_type": inventory_type.value},
            )
            return False

        self.logger.info(
            "Inventory unit allocated",
            extra={"product_id": product_id, "product_type": inventory_type.value},
        )
        return True

    @with_auto_commit
    async def restore(self, inventory_type: InventoryType) -> int:
        """
        Reset every purchased count of a type to zero.

        Args:
            inventory_type: Type to restore

        Returns:
            Number of records reset
        """
        count = await self.inventory_repo.reset_type(inventory_type.value)
        self.logger.warning(
            "Inventory restored",
            extra={"product_type": inventory_type.value, "records": count},
        )
        return count

    @with_auto_commit
    async def force_reset(self) -> None:
        """Drop and re-seed inventory for every limited type."""
        for inventory_type in INVENTORY_SEEDS:
            await self.inventory_repo.delete_type(inventory_type.value)
            await self._seed_type(inventory_type)
        self.logger.warning("Inventory force reset")

    async def get_inventory(
        self, inventory_type: InventoryType
    ) -> dict[str, tuple[int, int]]:
        """
        Current counts for a type.

        Returns:
            Mapping of product id to ``(purchased, total)``
        """
        records = await self.inventory_repo.get_type(inventory_type.value)
        return {
            record.product_id: (record.purchased, record.total)
            for record in records
        }

    async def get_product_availability(
        self, product_id: str, inventory_type: InventoryType
    ) -> tuple[int, int]:
        """
        Counts for one product.

        Returns:
            ``(purchased, total)``, or ``(0, 0)`` when unknown
        """
        record = await self.inventory_repo.get_record(
            inventory_type.value, product_id
        )
        if record is None:
            return 0, 0
        return record.purchased, record.total
