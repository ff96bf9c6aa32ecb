"""
Tracked Flight Price Check Tasks
"""
from celery import shared_task
import asyncio
import logging

from app.services.price_checker import price_checker
from app.utils.database import engine

logger = logging.getLogger(__name__)


async def _run_price_check() -> dict:
    try:
        summary = await price_checker.run_price_check()
    finally:
        # Pooled connections belong to this event loop only
        await engine.dispose()
    return summary.model_dump(mode="json")


@shared_task(bind=True, max_retries=0)
def check_tracked_flight_prices(self):
    """
    Check every active tracked flight once.
    Scheduled by beat every PRICE_CHECK_INTERVAL_MINUTES.
    """
    logger.info("Starting scheduled price check...")

    result = asyncio.run(_run_price_check())

    logger.info(
        f"Scheduled price check done: {result['checked']} checked, "
        f"{result['notifications']} notifications, success={result['success']}"
    )
    return result
