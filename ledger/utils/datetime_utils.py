"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """
    Tag naive datetimes as UTC.

    Args:
        value: Datetime, naive or aware

    Returns:
        Aware datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def add_days(start: datetime, days: int) -> datetime:
    """Return ``start`` shifted by ``days`` whole 24-hour periods."""
    return start + timedelta(days=days)


def date_key(value: datetime) -> str:
    """Format a datetime as the ``YYYY-MM-DD`` key used for daily records."""
    return ensure_aware(value).strftime("%Y-%m-%d")
