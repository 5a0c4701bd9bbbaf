#!/usr/bin/env python3
"""
Inventory administration.

Initializes, restores or force-resets inventory for limited plans.
"""

import argparse
import asyncio
import sys

from loguru import logger

from ledger.config.database import dispose_engine, session_scope
from ledger.config.logging import setup_logging
from ledger.models.enums import InventoryType
from ledger.services.inventory_service import InventoryManager


async def run(action: str, inventory_type: str | None) -> None:
    """Apply one inventory action and print the resulting counts."""
    async with session_scope() as session:
        manager = InventoryManager(session)

        if action == "init":
            seeded = await manager.initialize()
            for seeded_type, done in seeded.items():
                logger.info(f"{seeded_type}: {'seeded' if done else 'already initialized'}")
        elif action == "restore":
            if inventory_type is None:
                logger.error("--type is required for restore")
                sys.exit(2)
            count = await manager.restore(InventoryType(inventory_type))
            logger.info(f"Restored {count} {inventory_type} records")
        elif action == "force-reset":
            await manager.force_reset()
            logger.info("Inventory re-seeded")

        for listed_type in InventoryType:
            for product_id, (purchased, total) in (
                await manager.get_inventory(listed_type)
            ).items():
                logger.info(f"{listed_type}/{product_id}: {purchased}/{total}")

    await dispose_engine()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Manage plan inventory")
    parser.add_argument(
        "action",
        choices=["init", "restore", "force-reset"],
        help="Inventory action",
    )
    parser.add_argument(
        "--type",
        dest="inventory_type",
        choices=[t.value for t in InventoryType],
        help="Inventory type (required for restore)",
    )
    args = parser.parse_args()
    setup_logging()

    asyncio.run(run(args.action, args.inventory_type))


if __name__ == "__main__":
    main()
