"""
Business logic constants.

Central location for business rules used across services.
"""

from datetime import timedelta
from decimal import Decimal


# Referral bonus on first deposit: level -> share of the deposit
REFERRAL_RATES: dict[int, Decimal] = {
    1: Decimal("0.19"),  # direct referrer
    2: Decimal("0.02"),
    3: Decimal("0.01"),
}

REFERRAL_DEPTH = 3

# Legacy registration-time bonus: flat share of a fixed welcome bonus
WELCOME_BONUS = Decimal("300")
LEGACY_REFERRAL_BONUS_RATE = Decimal("0.24")

# Daily check-in
CHECK_IN_BONUS = Decimal("50")
CHECK_IN_INTERVAL = timedelta(hours=24)

# Daily payout cadence
PAYOUT_INTERVAL = timedelta(days=1)

# Referral codes
REFERRAL_CODE_LENGTH = 6
REFERRAL_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
REFERRAL_CODE_MAX_ATTEMPTS = 10


def get_referral_rate(level: int) -> Decimal:
    """
    Get referral share for a level.

    Args:
        level: Referral level (1-3)

    Returns:
        Share as a fraction, zero outside the configured levels
    """
    return REFERRAL_RATES.get(level, Decimal("0"))
