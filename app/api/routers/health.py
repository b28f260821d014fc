"""
Health check endpoints for monitoring and orchestration.

- /health, /health/live: liveness (always 200 while the process runs)
- /health/db: database connectivity
- /health/ready: readiness (database reachable, payment circuit not open)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.infrastructure.circuit_breaker import payment_breaker

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "rental-bookings-api"


async def _database_ok(session: AsyncSession) -> bool:
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        return True
    except Exception as e:  # noqa: BLE001
        logger.error("Database health check failed", exc_info=e)
        return False


@router.get("/health")
@router.get("/health/live")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    if await _database_ok(session):
        return {"status": "healthy", "component": "database"}
    return JSONResponse(
        status_code=503,
        content={
            "status": "unhealthy",
            "component": "database",
            "error": "Database connection failed",
        },
    )


@router.get("/health/ready")
async def health_check_ready(session: AsyncSession = Depends(get_db_session)):
    """
    Readiness probe.

    An open payment circuit does not make the service unready (bookings keep
    working); it is reported so operators can see confirmations are failing fast.
    """
    checks = {
        "database": "healthy" if await _database_ok(session) else "unhealthy",
        "payment_gateway_circuit": payment_breaker.current_state,
    }
    if checks["database"] != "healthy":
        return JSONResponse(status_code=503, content={"status": "not_ready", "checks": checks})
    return {"status": "ready", "checks": checks}
