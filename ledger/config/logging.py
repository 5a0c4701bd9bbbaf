"""
Logging setup.

Configures loguru sinks for stderr and a rotating log file.
"""

import sys

from loguru import logger

from ledger.config.settings import settings


def setup_logging(log_file: str | None = None, level: str | None = None) -> None:
    """
    Configure logger with file rotation.

    Args:
        log_file: Log file path (defaults to settings.log_file)
        level: Minimum level (defaults to settings.log_level)
    """
    level = level or settings.log_level

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        log_file or settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        level=level,
        encoding="utf-8",
        enqueue=True,
    )

    logger.info(f"Logging configured: level={level}, environment={settings.environment}")
