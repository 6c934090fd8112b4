"""Health check endpoints."""

from datetime import datetime
from enum import Enum

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.cache import get_redis_client
from core.database import get_session
from core.logging import get_logger

settings = get_settings()
logger = get_logger(__name__)
router = APIRouter()


class HealthStatus(str, Enum):
    """Health status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@router.get("/health")
async def health():
    """Basic health check endpoint."""
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


@router.get("/health/ready")
async def readiness_check(session: AsyncSession = Depends(get_session)):
    """Detailed readiness check."""
    checks = {}
    overall_status = HealthStatus.HEALTHY

    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = {"status": "ok"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        checks["database"] = {"status": "error", "error": str(e)}
        overall_status = HealthStatus.UNHEALTHY

    # Views are not counted while Redis is down, everything else keeps working
    if settings.view_dedup_backend == "redis":
        try:
            await get_redis_client().ping()
            checks["redis"] = {"status": "ok"}
        except (RedisError, OSError) as e:
            logger.error("Redis health check failed", error=str(e))
            checks["redis"] = {"status": "error", "error": str(e)}
            if overall_status == HealthStatus.HEALTHY:
                overall_status = HealthStatus.DEGRADED
    else:
        checks["redis"] = {"status": "not_used", "view_dedup": settings.view_dedup_backend}

    return {
        "status": overall_status.value,
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat(),
        "version": settings.app_version,
    }


@router.get("/health/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}
