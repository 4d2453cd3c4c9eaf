import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from apps.healthchat.db import get_healthchat_session, ping_healthchat_db

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_healthchat_session)):
    """Health check endpoint to verify the API and its database are reachable"""
    health_status = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "healthchat-api",
        "version": "1.0.0",
        "status": "unknown",
        "checks": {}
    }

    try:
        await ping_healthchat_db(db)
        health_status["checks"]["database"] = {"status": "healthy"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["checks"]["database"] = {
            "status": "error",
            "error": type(e).__name__
        }

    if all(check["status"] == "healthy" for check in health_status["checks"].values()):
        health_status["status"] = "healthy"
    else:
        health_status["status"] = "unhealthy"
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
