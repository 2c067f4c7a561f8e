from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from campushub.db.session import get_session
from campushub.cache.redis_client import cache
from campushub.core.logging import logger
from typing import Dict

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=Dict[str, str])
async def health_check():
    """
    Basic health check endpoint.

    Returns:
        Dict with status indicating the service is healthy
    """
    return {"status": "healthy"}


@router.get("/ready", response_model=Dict[str, str])
async def readiness_check(session: AsyncSession = Depends(get_session)):
    """Report database and Redis reachability; Redis is optional."""
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Readiness check: database unreachable: {e}")
        database = "unavailable"
    redis_state = "ok" if await cache.ping() else "unavailable"
    overall = "ready" if database == "ok" else "not_ready"
    return {"status": overall, "database": database, "redis": redis_state}
