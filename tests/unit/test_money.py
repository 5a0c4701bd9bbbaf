"""
Unit tests for money helpers.

Tests cover:
- Decimal conversion without float artifacts
- Half-away-from-zero rounding
- Percent shares
"""

from decimal import Decimal

import pytest

from ledger.utils.money import percent_of, round_currency, to_decimal


class TestToDecimal:
    """Test conversion to Decimal."""

    def test_float_goes_through_str(self):
        """0.1 stays 0.1, not its binary expansion."""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_is_returned_as_is(self):
        """Decimal input is not copied."""
        value = Decimal("12.34")
        assert to_decimal(value) is value

    def test_int_and_str(self):
        """Ints and numeric strings convert exactly."""
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("587.50") == Decimal("587.50")


class TestRounding:
    """Test whole-unit rounding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("0.5", "1"),
            ("2.5", "3"),
            ("2.49", "2"),
            ("-2.5", "-3"),
            ("117", "117"),
        ],
    )
    def test_round_half_up(self, value, expected):
        """Halves round away from zero."""
        assert round_currency(Decimal(value)) == Decimal(expected)

    def test_percent_of(self):
        """A 24% share of 300 is 72."""
        assert percent_of(300, Decimal("0.24")) == Decimal("72")
