"""
Referral system configuration.

Contains constants and configuration for the referral system.
"""

from decimal import Decimal

from ledger.config.business_constants import (
    LEGACY_REFERRAL_BONUS_RATE,
    REFERRAL_DEPTH,
    REFERRAL_RATES,
    WELCOME_BONUS,
    get_referral_rate,
)
from ledger.utils.money import percent_of, round_currency


def calculate_level_reward(amount: Decimal, level: int) -> Decimal:
    """
    Calculate the bonus for a referral level.

    Args:
        amount: Deposit amount
        level: Referral level (1-3)

    Returns:
        Bonus rounded to a whole unit (0 if level not configured)
    """
    rate = get_referral_rate(level)
    if rate == Decimal("0"):
        return Decimal("0")
    return percent_of(amount, rate)


# Legacy registration-time bonus: round(300 * 0.24) = 72
LEGACY_REFERRAL_BONUS = round_currency(WELCOME_BONUS * LEGACY_REFERRAL_BONUS_RATE)


__all__ = [
    "LEGACY_REFERRAL_BONUS",
    "REFERRAL_DEPTH",
    "REFERRAL_RATES",
    "calculate_level_reward",
]
