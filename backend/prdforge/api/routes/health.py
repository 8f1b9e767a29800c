import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from prdforge.db import ping_db

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness only; never touches the database."""
    return {"status": "healthy", "service": "prdforge"}


@router.get("/ready")
async def readiness_check():
    """503 until the database answers."""
    checks = {"database": False}

    try:
        await ping_db()
        checks["database"] = True
    except Exception as exc:
        logger.error("readiness_database_failed", error=str(exc), error_type=type(exc).__name__)

    ready = all(checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
