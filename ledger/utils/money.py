"""
Money helpers.

All amounts are ``Decimal`` in a single currency without minor units.
Rounding is half away from zero to the nearest whole unit.
"""

from decimal import ROUND_HALF_UP, Decimal

WHOLE_UNIT = Decimal("1")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a numeric value to Decimal without binary float artifacts.

    Args:
        value: Amount as Decimal, int, float or numeric string

    Returns:
        Decimal amount
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_currency(value: Decimal | int | float | str) -> Decimal:
    """
    Round to the nearest whole currency unit, halves away from zero.

    Args:
        value: Amount to round

    Returns:
        Rounded Decimal
    """
    return to_decimal(value).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal | int, rate: Decimal) -> Decimal:
    """
    Take ``rate`` (a fraction, e.g. ``Decimal("0.19")``) of ``amount``.

    Args:
        amount: Base amount
        rate: Fraction of the base amount

    Returns:
        Rounded share
    """
    return round_currency(to_decimal(amount) * rate)
