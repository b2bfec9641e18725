# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness, plus a readiness probe that touches every table the request
# workflow reads or writes.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.config import settings
from lib.supabase_client import (
    ARTWORKS_TABLE,
    NOTIFICATIONS_TABLE,
    REQUESTS_TABLE,
    SupabaseClient,
)

router = APIRouter()

API_VERSION = "1.0.0"

# Tables probed by /health/ready
WORKFLOW_TABLES = (ARTWORKS_TABLE, REQUESTS_TABLE, NOTIFICATIONS_TABLE)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ReadinessResponse(BaseModel):
    """Per-dependency status; "healthy" or "unhealthy: <reason>"."""
    status: str
    tables: dict[str, str] = Field(default_factory=dict)
    storage: str = "unknown"
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _probe(check) -> str:
    try:
        check()
        return "healthy"
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Ready when the workflow tables and artwork image storage respond.
    """
    client = None
    try:
        client = SupabaseClient.get_client()
    except Exception as e:
        reason = f"unhealthy: {str(e)[:50]}"
        return ReadinessResponse(
            status="degraded",
            tables={table: reason for table in WORKFLOW_TABLES},
            storage=reason,
            timestamp=_now(),
        )

    tables = {
        table: _probe(lambda t=table: client.table(t).select("id").limit(1).execute())
        for table in WORKFLOW_TABLES
    }
    storage = _probe(client.storage.list_buckets)

    all_healthy = storage == "healthy" and all(v == "healthy" for v in tables.values())

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        tables=tables,
        storage=storage,
        timestamp=_now(),
    )


@router.get("/health/live")
async def liveness_check():
    """Process is up. Used by container orchestrators for restart decisions."""
    return {"status": "alive", "timestamp": _now()}
