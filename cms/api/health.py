"""
Health check endpoints for container orchestration.
"""
import time
from typing import Dict, Any
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from cms.core.config import settings
from cms.core.database import get_db
from cms.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        Dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "service": settings.APP_NAME
    }


@router.get("/health/detailed")
async def detailed_health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check including database connectivity.

    Responds with 503 when the database cannot be reached.
    """
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": time.time(),
        "service": settings.APP_NAME,
        "checks": {}
    }

    try:
        start_time = time.time()
        await db.execute(text("SELECT 1"))
        db_duration = time.time() - start_time

        health_status["checks"]["database"] = {
            "status": "healthy",
            "response_time_ms": round(db_duration * 1000, 2)
        }
    except Exception as e:
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "unhealthy"
        await logger.aerror("Database health check failed", error=str(e))
        return JSONResponse(status_code=503, content=health_status)

    return health_status
