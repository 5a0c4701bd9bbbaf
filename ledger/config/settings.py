"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False
    database_pool_size: int = Field(default=10, ge=1)
    database_max_overflow: int = Field(default=20, ge=0)

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Environment
    environment: str = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/ledger.log"
    log_rotation: str = "1 day"
    log_retention: str = "7 days"

    # Referral
    legacy_registration_bonus_enabled: bool = Field(
        default=False,
        description="Pay the flat registration-time referral bonus"
    )

    # Payout sweep
    payout_batch_size: int = Field(
        default=500,
        ge=1,
        description="Products loaded per page during payout sweeps"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Production must not run against SQLite or with debug on."""
        if self.environment == 'production':
            if self.database_url.startswith('sqlite'):
                raise ValueError('SQLite is not supported in production')
            if self.debug:
                raise ValueError('DEBUG must be disabled in production')
        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        if v.startswith('postgresql://'):
            return v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of {sorted(VALID_LOG_LEVELS)}"
            )
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == 'production'


# Global settings instance
settings = Settings()
