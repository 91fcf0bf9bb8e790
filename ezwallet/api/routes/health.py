"""Service Status — liveness and database readiness for the deployment platform.

Invariants:
    - GET /api/health answers 200 while the process serves requests, without
      touching the database or the session cookies
    - GET /api/health/db answers 503 until the connection pool can run a query
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ezwallet.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])

SERVICE_NAME = "ezwallet"


@router.get("")
async def service_alive():
    return {"service": SERVICE_NAME, "alive": True}


@router.get("/db")
async def database_ready():
    # db_manager is read at call time: it is created in the lifespan
    manager = database.db_manager
    if manager is not None and await manager.health_check():
        return {"service": SERVICE_NAME, "database": "reachable"}
    logger.warning("Database not reachable", extra={"path": "/api/health/db"})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"service": SERVICE_NAME, "database": "unreachable"},
    )
