#!/usr/bin/env python3
"""
Run the product payout sweep once, in-process or through the queue.
"""

import argparse
import asyncio

from loguru import logger

from ledger.config.database import dispose_engine, get_session_maker
from ledger.config.logging import setup_logging


async def run_inline() -> None:
    """Run the sweep in this process."""
    from jobs.tasks.product_payouts import run_product_payouts

    summary = await run_product_payouts(get_session_maker())
    logger.info(f"Sweep summary: {summary}")
    await dispose_engine()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run product payouts")
    parser.add_argument(
        "--enqueue",
        action="store_true",
        help="Send the sweep to the Dramatiq queue instead of running it here",
    )
    args = parser.parse_args()
    setup_logging()

    if args.enqueue:
        from jobs.tasks.product_payouts import process_product_payouts

        process_product_payouts.send()
        logger.info("Product payout sweep enqueued")
        return

    asyncio.run(run_inline())


if __name__ == "__main__":
    main()
