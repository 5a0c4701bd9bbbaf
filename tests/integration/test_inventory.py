"""
Integration tests for the inventory manager.

Tests cover:
- Idempotent initialization
- Allocation stops at the configured total
- Concurrent buyers never oversell
- Administrative restore and force reset
"""

import asyncio

import pytest

from ledger.models.enums import InventoryType
from ledger.services.inventory_service import InventoryManager


class TestInitialize:
    """Test inventory seeding."""

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, session):
        """A second call leaves the state unchanged."""
        manager = InventoryManager(session)

        first = await manager.initialize()
        await manager.increase_purchased_count("special-1", InventoryType.SPECIAL)
        state_before = await manager.get_inventory(InventoryType.SPECIAL)
        second = await manager.initialize()
        state_after = await manager.get_inventory(InventoryType.SPECIAL)

        assert first == {InventoryType.SPECIAL: True, InventoryType.PREMIUM: True}
        assert second == {InventoryType.SPECIAL: False, InventoryType.PREMIUM: False}
        assert state_after == state_before
        assert state_after["special-1"] == (1, 50)

    @pytest.mark.asyncio
    async def test_seeded_counts(self, session):
        """Every limited plan starts at zero purchased."""
        manager = InventoryManager(session)
        await manager.initialize()

        special = await manager.get_inventory(InventoryType.SPECIAL)
        premium = await manager.get_inventory(InventoryType.PREMIUM)

        assert len(special) == 11
        assert len(premium) == 10
        assert premium["premium-1"] == (0, 200)
        assert all(purchased == 0 for purchased, _ in special.values())


class TestAllocation:
    """Test purchased-count increments."""

    @pytest.mark.asyncio
    async def test_last_unit_then_sold_out(self, session):
        """special-11 has exactly one unit."""
        manager = InventoryManager(session)
        await manager.initialize()

        assert await manager.is_available("special-11", InventoryType.SPECIAL) is True
        assert await manager.increase_purchased_count("special-11", InventoryType.SPECIAL) is True
        assert await manager.is_available("special-11", InventoryType.SPECIAL) is False
        assert await manager.increase_purchased_count("special-11", InventoryType.SPECIAL) is False
        assert await manager.get_product_availability(
            "special-11", InventoryType.SPECIAL
        ) == (1, 1)

    @pytest.mark.asyncio
    async def test_unknown_product(self, session):
        """Unknown products are never available and never incremented."""
        manager = InventoryManager(session)
        await manager.initialize()

        assert await manager.is_available("special-99", InventoryType.SPECIAL) is False
        assert await manager.increase_purchased_count("special-99", InventoryType.SPECIAL) is False
        assert await manager.get_product_availability(
            "special-99", InventoryType.SPECIAL
        ) == (0, 0)

    @pytest.mark.asyncio
    async def test_wrong_type_is_unknown(self, session):
        """Records are keyed by type and product id."""
        manager = InventoryManager(session)
        await manager.initialize()

        assert await manager.is_available("special-1", InventoryType.PREMIUM) is False

    @pytest.mark.asyncio
    async def test_concurrent_buyers_never_oversell(self, session_maker):
        """Six buyers race for three units; exactly three win."""
        async with session_maker() as setup_session:
            await InventoryManager(setup_session).initialize()

        async def buy() -> bool:
            async with session_maker() as buyer_session:
                return await InventoryManager(buyer_session).increase_purchased_count(
                    "special-10", InventoryType.SPECIAL
                )

        results = await asyncio.gather(*(buy() for _ in range(6)))

        assert results.count(True) == 3
        async with session_maker() as check_session:
            assert await InventoryManager(check_session).get_product_availability(
                "special-10", InventoryType.SPECIAL
            ) == (3, 3)


class TestAdministration:
    """Test restore and force reset."""

    @pytest.mark.asyncio
    async def test_restore_resets_one_type(self, session):
        """Restore zeroes a type and leaves the other alone."""
        manager = InventoryManager(session)
        await manager.initialize()
        await manager.increase_purchased_count("special-1", InventoryType.SPECIAL)
        await manager.increase_purchased_count("premium-1", InventoryType.PREMIUM)

        restored = await manager.restore(InventoryType.SPECIAL)

        assert restored == 11
        assert (await manager.get_inventory(InventoryType.SPECIAL))["special-1"] == (0, 50)
        assert (await manager.get_inventory(InventoryType.PREMIUM))["premium-1"] == (1, 200)

    @pytest.mark.asyncio
    async def test_force_reset_reseeds(self, session):
        """Force reset drops counts for every type."""
        manager = InventoryManager(session)
        await manager.initialize()
        await manager.increase_purchased_count("special-11", InventoryType.SPECIAL)
        await manager.increase_purchased_count("premium-10", InventoryType.PREMIUM)

        await manager.force_reset()

        assert await manager.get_product_availability(
            "special-11", InventoryType.SPECIAL
        ) == (0, 1)
        assert await manager.is_available("premium-10", InventoryType.PREMIUM) is True
