"""
Unit tests for settings validation.

Tests cover:
- Database URL schemes
- Production restrictions
- Log level validation
"""

import pytest
from pydantic import ValidationError

from ledger.config.settings import Settings


class TestDatabaseUrl:
    """Test DATABASE_URL validation."""

    def test_plain_postgres_gets_async_driver(self):
        """postgresql:// is rewritten to the asyncpg driver."""
        settings = Settings(database_url="postgresql://u:p@localhost/ledger")
        assert settings.database_url == "postgresql+asyncpg://u:p@localhost/ledger"

    def test_sqlite_accepted_outside_production(self):
        """aiosqlite URLs are fine for development and tests."""
        settings = Settings(
            database_url="sqlite+aiosqlite:///:memory:", environment="development"
        )
        assert settings.database_url.startswith("sqlite+aiosqlite")

    def test_unknown_scheme_rejected(self):
        """MySQL is not supported."""
        with pytest.raises(ValidationError):
            Settings(database_url="mysql://localhost/ledger")


class TestProductionRules:
    """Test production-only validation."""

    def test_sqlite_rejected_in_production(self):
        """Production requires PostgreSQL."""
        with pytest.raises(ValidationError):
            Settings(database_url="sqlite+aiosqlite:///x.db", environment="production")

    def test_debug_rejected_in_production(self):
        """DEBUG cannot be on in production."""
        with pytest.raises(ValidationError):
            Settings(
                database_url="postgresql://localhost/ledger",
                environment="production",
                debug=True,
            )


class TestLogLevel:
    """Test LOG_LEVEL validation."""

    def test_level_is_upper_cased(self):
        """Lower-case levels are accepted."""
        settings = Settings(database_url="sqlite+aiosqlite://", log_level="warning")
        assert settings.log_level == "WARNING"

    def test_unknown_level_rejected(self):
        """Levels outside loguru's set are rejected."""
        with pytest.raises(ValidationError):
            Settings(database_url="sqlite+aiosqlite://", log_level="verbose")
