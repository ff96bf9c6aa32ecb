"""
Scheduled Job Endpoints - HTTP trigger for the periodic price check
"""
from fastapi import APIRouter, Depends, Header, HTTPException, status
from typing import Optional
from datetime import datetime, timezone
import logging

from app.config import settings
from app.services.price_checker import PriceChecker, get_price_checker

router = APIRouter()
logger = logging.getLogger(__name__)


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Require `Bearer <CRON_SECRET>` when a secret is configured"""
    if settings.CRON_SECRET and authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )


@router.get("/check-prices", dependencies=[Depends(verify_cron_secret)])
async def check_prices(checker: PriceChecker = Depends(get_price_checker)):
    """
    Check every active tracked flight once
    """
    logger.info("Cron job triggered: checking flight prices")

    try:
        summary = await checker.run_price_check()
    except Exception as e:
        logger.error(f"Cron price check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check prices"
        )

    return {
        "message": "Price check completed" if summary.success else "Price check skipped",
        **summary.model_dump(mode="json"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
