"""
Service info, health and readiness endpoints.

This module provides:
- /: Service name, version and where the API lives
- /health: Liveness probe (is the app running?)
- /ready: Readiness probe (is the database reachable?)

No authentication required (infrastructure use).
"""
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.dependencies import get_database
from repositories import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "Medical Records Service API"
SERVICE_VERSION = "1.0.0"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class ServiceInfo(BaseModel):
    name: str
    version: str
    docs: str
    api_prefix: str


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str  # "ok" or "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    """Response model for /ready endpoint."""
    status: str  # "ready" or "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/", response_model=ServiceInfo, summary="Service information")
async def root() -> ServiceInfo:
    return ServiceInfo(
        name=SERVICE_NAME,
        version=SERVICE_VERSION,
        docs="/docs",
        api_prefix="/api/v1",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=SERVICE_VERSION, timestamp=_timestamp())


def _check_database(db: Database) -> DependencyStatus:
    """Run a trivial query against SQLite."""
    start = time.perf_counter()
    try:
        conn = db.get_connection()
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
        return DependencyStatus(
            name="database",
            status="ok",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            message="SQLite connection healthy"
        )
    except Exception as e:
        logger.error("Database health check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="database",
            status="unavailable",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            message=f"Connection failed: {type(e).__name__}"
        )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Verifies the database is reachable. Returns 503 if not ready."
)
async def readiness_check(
    response: Response,
    db: Database = Depends(get_database)
) -> ReadyResponse:
    db_status = _check_database(db)
    if db_status.status == "ok":
        status = "ready"
    else:
        status = "not_ready"
        response.status_code = 503

    return ReadyResponse(status=status, dependencies=[db_status], timestamp=_timestamp())
