"""Health Checks — liveness and database readiness.

Invariants:
    - /health/ answers 200 whenever the process serves requests
    - /health/ready answers 503 until the database answers SELECT 1
    - Neither check takes a row lock or opens a UnitOfWork
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from temple_ledger.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "temple-ledger"


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness():
    # db_manager is read at call time: init_db replaces the module attribute
    manager = database.db_manager
    started = time.perf_counter()
    reachable = manager is not None and await manager.health_check()
    if not reachable:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "checks": {"database": "unreachable"}},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
    }
