"""
Unit tests for the investment plan catalog.

Tests cover:
- Catalog size per plan family
- Lookup by id and unknown ids
- Plan family and inventory type derived from the id prefix
- Daily income consistency with price and daily ROI
"""

from decimal import Decimal

import pytest

from ledger.config.plans import (
    BASIC_PLANS,
    PREMIUM_PLANS,
    SPECIAL_PLANS,
    get_plan,
    get_plans,
    inventory_type_for,
    plan_type_for,
)
from ledger.models.enums import InventoryType, PlanType


class TestCatalogContents:
    """Test the fixed plan tables."""

    def test_family_sizes(self):
        """Eleven Basic, eleven Special and ten Premium plans."""
        assert len(BASIC_PLANS) == 11
        assert len(SPECIAL_PLANS) == 11
        assert len(PREMIUM_PLANS) == 10

    def test_ids_are_unique(self):
        """No two plans share an id."""
        ids = [plan.id for plan in BASIC_PLANS + SPECIAL_PLANS + PREMIUM_PLANS]
        assert len(ids) == len(set(ids))

    def test_special_1_values(self):
        """Special 1 matches its published terms."""
        plan = get_plan("special-1")

        assert plan.price == Decimal("3000")
        assert plan.daily_roi == Decimal("3.9")
        assert plan.cycle_days == 365
        assert plan.daily_income == Decimal("117")
        assert plan.total_return == Decimal("42705")

    def test_premium_1_has_short_cycle(self):
        """Premium 1 is the only seven-day plan."""
        plan = get_plan("premium-1")

        assert plan.cycle_days == 7
        assert plan.total_return == Decimal("6965")

    @pytest.mark.parametrize(
        "plan",
        BASIC_PLANS + SPECIAL_PLANS + PREMIUM_PLANS,
        ids=lambda plan: plan.id,
    )
    def test_daily_income_matches_roi(self, plan):
        """Daily income is price times daily ROI percent."""
        assert plan.daily_income == plan.price * plan.daily_roi / 100


class TestCatalogLookup:
    """Test lookup helpers."""

    def test_unknown_plan_returns_none(self):
        """Unknown ids are not an error."""
        assert get_plan("gold-1") is None

    def test_get_plans_by_family(self):
        """get_plans returns the family table."""
        assert get_plans(PlanType.SPECIAL) == SPECIAL_PLANS

    @pytest.mark.parametrize(
        ("plan_id", "expected"),
        [
            ("basic-3", PlanType.BASIC),
            ("special-11", PlanType.SPECIAL),
            ("premium-10", PlanType.PREMIUM),
        ],
    )
    def test_plan_type_from_prefix(self, plan_id, expected):
        """Plan family comes from the id prefix."""
        assert plan_type_for(plan_id) is expected
        assert get_plan(plan_id).plan_type is expected

    def test_unknown_prefix_raises(self):
        """An id without a known prefix is rejected."""
        with pytest.raises(ValueError):
            plan_type_for("gold-1")

    def test_inventory_type(self):
        """Only Special and Premium plans are inventory limited."""
        assert inventory_type_for("basic-1") is None
        assert inventory_type_for("special-1") is InventoryType.SPECIAL
        assert inventory_type_for("premium-1") is InventoryType.PREMIUM
