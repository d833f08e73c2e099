"""Health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from customer_accounts.core.logging import get_logger
from customer_accounts.core.time import utcnow
from customer_accounts.db import session as db_session
from customer_accounts.schemas.envelope import HealthResponse

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check; only verifies the app responds."""
    return HealthResponse(status="ok", timestamp=utcnow().isoformat())


@router.get("/health/ready")
def health_ready():
    """Readiness check.

    Returns 200 when the database answers ``SELECT 1`` and 503 otherwise.
    """
    database = {"status": "ok"}
    healthy = True
    try:
        db = db_session.SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as e:
        logger.warning("Database readiness check failed: %s", e)
        database = {"status": "unavailable", "error": str(e)}
        healthy = False

    result = {
        "status": "ok" if healthy else "unavailable",
        "timestamp": utcnow().isoformat(),
        "database": database,
    }
    if healthy:
        return result
    return JSONResponse(status_code=503, content=result)
