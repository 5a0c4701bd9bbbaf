"""
Standard type definitions for database models.

Provides consistent types for monetary, percentage and timestamp fields
across all models.
"""

from datetime import UTC, datetime

from sqlalchemy import DECIMAL, DateTime
from sqlalchemy.types import TypeDecorator


# Standard money type for amounts and balances
# Precision: 18 digits total, 2 after decimal point
# Plan constants carry at most two decimals (e.g. 587.50 daily income)
MoneyType = DECIMAL(18, 2)

# Percentage type for daily ROI rates (e.g. 3.90%, 23.50%)
PercentType = DECIMAL(5, 2)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime column.

    PostgreSQL keeps the offset natively; backends without timezone
    support (SQLite) hand back naive values, which are tagged as UTC on
    load so comparisons with ``utc_now()`` never mix naive and aware.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
