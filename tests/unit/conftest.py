"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Fixed reference time
- Mock update result with a configurable rowcount
- Mock UPDATE ... RETURNING result
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def now():
    """Fixed reference time for rule tests."""
    return datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def update_result():
    """
    Factory for a mocked ``session.execute`` result of an UPDATE.

    Returns:
        Callable building a MagicMock with ``rowcount`` set
    """

    def _make(rowcount: int) -> MagicMock:
        result = MagicMock()
        result.rowcount = rowcount
        return result

    return _make


@pytest.fixture
def returning_result():
    """
    Factory for a mocked ``session.execute`` result of an UPDATE ... RETURNING.

    Returns:
        Callable building a MagicMock whose ``scalar_one_or_none`` yields ``value``
    """

    def _make(value) -> MagicMock:
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        return result

    return _make
