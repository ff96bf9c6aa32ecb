"""
Health Check Endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
import redis.asyncio as redis

from app.utils.database import get_db
from app.utils.redis import get_redis
from app.services.providers import provider_manager

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "peregrinus-api"}


@router.get("/health/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    cache: redis.Redis = Depends(get_redis),
):
    """
    Readiness check - verifies the database, cache and price providers
    """
    checks = {
        "postgres": False,
        "redis": False,
    }

    # Check PostgreSQL
    try:
        await db.execute(text("SELECT 1"))
        checks["postgres"] = True
    except Exception as e:
        checks["postgres_error"] = str(e)

    # Check Redis
    try:
        checks["redis"] = bool(await cache.ping())
    except Exception as e:
        checks["redis_error"] = str(e)

    checks["providers"] = await provider_manager.health_check()

    return {
        "status": "ready" if checks["postgres"] and checks["redis"] else "degraded",
        "checks": checks
    }


@router.get("/health/live")
async def liveness_check():
    """Liveness check - is the service running"""
    return {"status": "alive"}
