"""
Product payout task.

Runs the expiry sweep followed by the daily payout sweep. Triggering
(cron, scheduler) is left to the deployment.
"""

import asyncio
from datetime import datetime

import dramatiq
import redis.asyncio as redis
from loguru import logger

from jobs.broker import broker  # noqa: F401  registers the broker before actors
from jobs.utils.database import create_task_engine, create_task_session_maker
from ledger.config.settings import settings
from ledger.services.product.lifecycle_service import ProductLifecycleService
from ledger.utils.datetime_utils import ensure_aware


LOCK_NAME = "ledger:product_payouts"
LOCK_TIMEOUT_SECONDS = 600


@dramatiq.actor(max_retries=3, time_limit=900_000)  # 15 min, above the lock timeout
def process_product_payouts(now_iso: str | None = None) -> None:
    """
    Process product expirations and daily payouts.

    Args:
        now_iso: Optional ISO-8601 sweep time (defaults to now)
    """
    logger.info("Starting product payout sweep...")

    now = ensure_aware(datetime.fromisoformat(now_iso)) if now_iso else None
    summary = asyncio.run(_process_product_payouts_async(now))

    if summary is None:
        logger.info("Product payout sweep already running elsewhere, skipped")
        return

    logger.info(
        f"Product payout sweep complete: "
        f"{summary['completed']} completed, {summary['paid']} paid, "
        f"{summary['failed']} failed, total: {summary['total_amount']}"
    )


async def _process_product_payouts_async(now: datetime | None) -> dict | None:
    """Async implementation guarded by a Redis lock."""
    redis_client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
    )
    lock = redis_client.lock(LOCK_NAME, timeout=LOCK_TIMEOUT_SECONDS)

    if not await lock.acquire(blocking=False):
        await redis_client.aclose()
        return None

    engine = create_task_engine()
    try:
        return await run_product_payouts(create_task_session_maker(engine), now)
    finally:
        await lock.release()
        await redis_client.aclose()
        await engine.dispose()


async def run_product_payouts(session_maker, now: datetime | None = None) -> dict:
    """
    Run the combined sweep with a fresh session.

    Args:
        session_maker: Async session factory
        now: Sweep time (defaults to now)

    Returns:
        Sweep summary
    """
    async with session_maker() as session:
        service = ProductLifecycleService(session)
        return await service.process_daily_payouts(now)
