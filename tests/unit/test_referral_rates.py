"""
Unit tests for referral bonus rates and rounding.

Tests cover:
- Level shares of a first deposit
- Half-up rounding to whole units
- Levels outside the configured depth
- Legacy flat bonus
"""

from decimal import Decimal

import pytest

from ledger.services.referral.config import (
    LEGACY_REFERRAL_BONUS,
    REFERRAL_DEPTH,
    REFERRAL_RATES,
    calculate_level_reward,
)


class TestLevelRewards:
    """Test level-scaled deposit bonuses."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [(1, Decimal("1900")), (2, Decimal("200")), (3, Decimal("100"))],
    )
    def test_ten_thousand_deposit(self, level, expected):
        """A 10,000 deposit pays 1,900 / 200 / 100."""
        assert calculate_level_reward(Decimal("10000"), level) == expected

    def test_half_rounds_up(self):
        """1250 * 0.19 = 237.5 rounds to 238."""
        assert calculate_level_reward(Decimal("1250"), 1) == Decimal("238")

    def test_below_half_rounds_down(self):
        """1234 * 0.01 = 12.34 rounds to 12."""
        assert calculate_level_reward(Decimal("1234"), 3) == Decimal("12")

    def test_unconfigured_level_pays_nothing(self):
        """Level four and beyond are outside the chain."""
        assert calculate_level_reward(Decimal("10000"), REFERRAL_DEPTH + 1) == 0

    def test_depth_matches_rates(self):
        """Every level up to the depth has a rate."""
        assert sorted(REFERRAL_RATES) == list(range(1, REFERRAL_DEPTH + 1))


class TestLegacyBonus:
    """Test the registration-time flat bonus."""

    def test_legacy_bonus_amount(self):
        """24% of the 300 welcome bonus."""
        assert LEGACY_REFERRAL_BONUS == Decimal("72")
