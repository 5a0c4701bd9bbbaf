"""
Inventory seed configuration.

Unit caps for inventory-limited plans. Basic plans are unlimited.
"""

from typing import NamedTuple

from ledger.models.enums import InventoryType


class InventorySeed(NamedTuple):
    """Initial inventory record."""

    product_id: str
    name: str
    total: int


INVENTORY_SEEDS: dict[InventoryType, tuple[InventorySeed, ...]] = {
    InventoryType.SPECIAL: (
        InventorySeed("special-1", "Special 1", 50),
        InventorySeed("special-2", "Special 2", 50),
        InventorySeed("special-3", "Special 3", 50),
        InventorySeed("special-4", "Special 4", 50),
        InventorySeed("special-5", "Special 5", 50),
        InventorySeed("special-6", "Special 6", 35),
        InventorySeed("special-7", "Special 7", 25),
        InventorySeed("special-8", "Special 8", 15),
        InventorySeed("special-9", "Special 9", 5),
        InventorySeed("special-10", "Special 10", 3),
        InventorySeed("special-11", "Special 11", 1),
    ),
    InventoryType.PREMIUM: (
        InventorySeed("premium-1", "Premium 1", 200),
        InventorySeed("premium-2", "Premium 2", 55),
        InventorySeed("premium-3", "Premium 3", 55),
        InventorySeed("premium-4", "Premium 4", 55),
        InventorySeed("premium-5", "Premium 5", 50),
        InventorySeed("premium-6", "Premium 6", 45),
        InventorySeed("premium-7", "Premium 7", 20),
        InventorySeed("premium-8", "Premium 8", 10),
        InventorySeed("premium-9", "Premium 9", 2),
        InventorySeed("premium-10", "Premium 10", 1),
    ),
}


def get_seed_total(inventory_type: InventoryType, product_id: str) -> int | None:
    """Configured cap for a product, None if it is not inventory-limited."""
    for seed in INVENTORY_SEEDS.get(inventory_type, ()):
        if seed.product_id == product_id:
            return seed.total
    return None
