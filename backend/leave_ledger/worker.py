"""Worker process for the scheduled ledger jobs.

Runs an asyncio loop that executes the monthly accrual and the anniversary
carry-forward once per interval. Both jobs are idempotent, so running them
daily (or twice on the same day) credits each period only once.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_ledger.config import get_settings
from leave_ledger.db import session_scope
from leave_ledger.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def run_scheduled_jobs(today: date) -> None:
    """Run the monthly accrual for today's month and anniversaries falling on today."""
    from leave_ledger.services.accrual import run_anniversary_processing, run_monthly_accrual

    logger.info("Running monthly accrual for %s", today)
    try:
        async with session_scope() as session:
            result = await run_monthly_accrual(session, today)
        logger.info(
            "Monthly accrual complete for %s: processed=%d credited=%d skipped=%d errors=%d",
            result.period,
            result.processed,
            result.credited,
            result.skipped,
            result.errors,
        )
    except Exception:
        logger.exception("Monthly accrual failed for %s", today)

    try:
        async with session_scope() as session:
            anniversary = await run_anniversary_processing(session, today)
        if anniversary.processed > 0:
            logger.info(
                "Anniversary run for %s: processed=%d carried=%d skipped=%d errors=%d",
                today,
                anniversary.processed,
                anniversary.carried,
                anniversary.skipped,
                anniversary.errors,
            )
    except Exception:
        logger.exception("Anniversary run failed for %s", today)


async def run_accrual_loop() -> None:
    """Main worker loop."""
    interval = get_settings().accrual_interval_seconds
    logger.info("Accrual worker started, interval=%ds", interval)

    while True:
        await run_scheduled_jobs(date.today())
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    configure_logging(get_settings().log_level)
    asyncio.run(run_accrual_loop())


if __name__ == "__main__":
    main()
