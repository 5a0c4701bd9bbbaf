"""Configuration package."""

from ledger.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
