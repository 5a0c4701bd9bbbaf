"""
Investment plan catalog.

Single source of truth for every purchasable plan. Values are fixed
constants; ``daily_income`` is ``price * daily_roi / 100`` and
``total_return`` is the amount quoted to the buyer for the full cycle.
"""

from decimal import Decimal
from typing import NamedTuple

from ledger.models.enums import InventoryType, PlanType


class PlanConfig(NamedTuple):
    """Plan definition."""

    id: str
    name: str
    price: Decimal
    daily_roi: Decimal  # percent per day
    cycle_days: int
    daily_income: Decimal
    total_return: Decimal

    @property
    def plan_type(self) -> PlanType:
        """Plan family derived from the id prefix."""
        return plan_type_for(self.id)

    @property
    def inventory_type(self) -> InventoryType | None:
        """Inventory collection for limited plans, None for unlimited ones."""
        return inventory_type_for(self.id)


def _plan(
    plan_id: str,
    name: str,
    price: int,
    daily_roi: str,
    cycle_days: int,
    daily_income: str,
    total_return: int,
) -> PlanConfig:
    return PlanConfig(
        id=plan_id,
        name=name,
        price=Decimal(price),
        daily_roi=Decimal(daily_roi),
        cycle_days=cycle_days,
        daily_income=Decimal(daily_income),
        total_return=Decimal(total_return),
    )


# Basic: 23.5% daily, 30 days, lump sum at maturity
BASIC_PLANS: tuple[PlanConfig, ...] = (
    _plan("basic-1", "Basic 1", 2500, "23.5", 30, "587.50", 17625),
    _plan("basic-2", "Basic 2", 5000, "23.5", 30, "1175", 35250),
    _plan("basic-3", "Basic 3", 10000, "23.5", 30, "2350", 70500),
    _plan("basic-4", "Basic 4", 20000, "23.5", 30, "4700", 141000),
    _plan("basic-5", "Basic 5", 50000, "23.5", 30, "11750", 352500),
    _plan("basic-6", "Basic 6", 100000, "23.5", 30, "23500", 705000),
    _plan("basic-7", "Basic 7", 150000, "23.5", 30, "35250", 1057500),
    _plan("basic-8", "Basic 8", 200000, "23.5", 30, "47000", 1410000),
    _plan("basic-9", "Basic 9", 300000, "23.5", 30, "70500", 2115000),
    _plan("basic-10", "Basic 10", 400000, "23.5", 30, "94000", 2820000),
    _plan("basic-11", "Basic 11", 500000, "23.5", 30, "117500", 3525000),
)

# Special: 3.9% daily, 365 days, paid out daily, principal at maturity
SPECIAL_PLANS: tuple[PlanConfig, ...] = (
    _plan("special-1", "Special 1", 3000, "3.9", 365, "117", 42705),
    _plan("special-2", "Special 2", 5000, "3.9", 365, "195", 71175),
    _plan("special-3", "Special 3", 12000, "3.9", 365, "468", 170820),
    _plan("special-4", "Special 4", 26000, "3.9", 365, "1014", 370110),
    _plan("special-5", "Special 5", 50000, "3.9", 365, "1950", 711750),
    _plan("special-6", "Special 6", 100000, "3.9", 365, "3900", 1423500),
    _plan("special-7", "Special 7", 150000, "3.9", 365, "5850", 2135250),
    _plan("special-8", "Special 8", 200000, "3.9", 365, "7800", 2847000),
    _plan("special-9", "Special 9", 300000, "3.9", 365, "11700", 4270500),
    _plan("special-10", "Special 10", 500000, "3.9", 365, "19500", 7117500),
    _plan("special-11", "Special 11", 1000000, "3.9", 365, "39000", 14235000),
)

# Premium: short cycles, lump sum at maturity
PREMIUM_PLANS: tuple[PlanConfig, ...] = (
    _plan("premium-1", "Premium 1", 5000, "19.9", 7, "995", 6965),
    _plan("premium-2", "Premium 2", 10000, "12.6", 10, "1260", 12600),
    _plan("premium-3", "Premium 3", 20000, "12.6", 10, "2520", 25200),
    _plan("premium-4", "Premium 4", 30000, "12.6", 10, "3780", 37800),
    _plan("premium-5", "Premium 5", 50000, "12.6", 10, "6300", 63000),
    _plan("premium-6", "Premium 6", 100000, "12.6", 10, "12600", 126000),
    _plan("premium-7", "Premium 7", 150000, "12.6", 10, "18900", 189000),
    _plan("premium-8", "Premium 8", 200000, "12.6", 10, "25200", 252000),
    _plan("premium-9", "Premium 9", 300000, "12.6", 10, "37800", 378000),
    _plan("premium-10", "Premium 10", 500000, "12.6", 10, "63000", 630000),
)

PLANS_BY_TYPE: dict[PlanType, tuple[PlanConfig, ...]] = {
    PlanType.BASIC: BASIC_PLANS,
    PlanType.SPECIAL: SPECIAL_PLANS,
    PlanType.PREMIUM: PREMIUM_PLANS,
}

PLANS_BY_ID: dict[str, PlanConfig] = {
    plan.id: plan
    for plans in PLANS_BY_TYPE.values()
    for plan in plans
}

_TYPE_PREFIXES: dict[str, PlanType] = {
    "basic-": PlanType.BASIC,
    "special-": PlanType.SPECIAL,
    "premium-": PlanType.PREMIUM,
}

LIMITED_PLAN_TYPES: dict[PlanType, InventoryType] = {
    PlanType.SPECIAL: InventoryType.SPECIAL,
    PlanType.PREMIUM: InventoryType.PREMIUM,
}


def get_plan(plan_id: str) -> PlanConfig | None:
    """
    Get plan by id.

    Args:
        plan_id: Plan identifier, e.g. ``special-1``

    Returns:
        PlanConfig or None if unknown
    """
    return PLANS_BY_ID.get(plan_id)


def plan_type_for(plan_id: str) -> PlanType:
    """
    Derive plan family from the id prefix.

    Raises:
        ValueError: If the prefix is unknown
    """
    for prefix, plan_type in _TYPE_PREFIXES.items():
        if plan_id.startswith(prefix):
            return plan_type
    raise ValueError(f"Unknown plan id: {plan_id}")


def inventory_type_for(plan_id: str) -> InventoryType | None:
    """Inventory collection for a plan id, None when the plan is unlimited."""
    return LIMITED_PLAN_TYPES.get(plan_type_for(plan_id))


def get_plans(plan_type: PlanType) -> tuple[PlanConfig, ...]:
    """Get all plans of a family."""
    return PLANS_BY_TYPE[plan_type]
