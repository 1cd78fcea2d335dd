"""Health & Readiness Probes: liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the key-value database is unreachable
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from stoic_journal.api.dependencies import get_context
from stoic_journal.services.app_context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {"status": "ok", "service": "stoic-journal-api"}


@router.get("/ready")
async def readiness_check(context: AppContext = Depends(get_context)):
    """Readiness probe: includes database connectivity."""
    manager = context.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
