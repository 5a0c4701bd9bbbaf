"""
Payout rules per plan type.

Pure functions of a product snapshot and the current time. Special
plans trickle their profit out daily and return the principal at
maturity; Basic and Premium accrue silently and pay ``total_earning``
in one lump sum at maturity.
"""

from datetime import datetime
from decimal import ROUND_FLOOR, Decimal

from ledger.config.business_constants import PAYOUT_INTERVAL
from ledger.models.enums import PlanType
from ledger.utils.datetime_utils import ensure_aware


def pays_daily(plan_type: PlanType | str) -> bool:
    """Only Special plans credit a daily payout."""
    return PlanType(plan_type) is PlanType.SPECIAL


def final_payout_amount(
    plan_type: PlanType | str, price: Decimal, total_earning: Decimal
) -> Decimal:
    """
    Amount credited when a product completes.

    Args:
        plan_type: Plan family
        price: Principal paid at purchase
        total_earning: Quoted total return

    Returns:
        ``price`` for Special, ``total_earning`` otherwise
    """
    if PlanType(plan_type) is PlanType.SPECIAL:
        return price
    return total_earning


def is_expired(end_date: datetime, now: datetime) -> bool:
    """A product has reached maturity once ``now >= end_date``."""
    return ensure_aware(now) >= ensure_aware(end_date)


def daily_payout_due(
    start_date: datetime,
    last_payout_date: datetime | None,
    end_date: datetime,
    now: datetime,
) -> bool:
    """
    Check whether a daily payout is due.

    Due when the product has not expired and at least one full payout
    interval passed since the later of the last payout and the start.
    At most one payout is due per check; missed days are not summed.
    """
    if is_expired(end_date, now):
        return False
    last_paid = ensure_aware(last_payout_date or start_date)
    return ensure_aware(now) - last_paid >= PAYOUT_INTERVAL


def payout_cutoff(now: datetime) -> datetime:
    """Latest last-payout time that still makes a payout due at ``now``."""
    return ensure_aware(now) - PAYOUT_INTERVAL


def task_daily_reward(total_return: Decimal, cycle_days: int) -> Decimal:
    """Whole-unit daily reward shown on a product task."""
    if cycle_days <= 0:
        return Decimal("0")
    return (total_return / cycle_days).quantize(Decimal("1"), rounding=ROUND_FLOOR)
