"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from trend_monitor import __version__
from trend_monitor.api.dependencies import get_database, get_registry
from trend_monitor.api.models import ComponentHealth, HealthResponse
from trend_monitor.ingestion.registry import CollectorRegistry
from trend_monitor.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check database connectivity and which adapters are enabled.",
)
async def health_check(
    db: Database = Depends(get_database),
    registry: CollectorRegistry = Depends(get_registry),
) -> HealthResponse:
    """
    Status logic:
    - unhealthy: database is down
    - degraded: at least one adapter is disabled (e.g. missing API key)
    - healthy: all components operational
    """
    db_health = await _check_database(db)

    adapters = {
        kind.value: adapter.disabled_reason() or "enabled"
        for kind, adapter in registry.adapters.items()
    }

    if db_health.status == "unhealthy":
        status = "unhealthy"
    elif any(state != "enabled" for state in adapters.values()):
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        components={"database": db_health},
        adapters=adapters,
        version=__version__,
    )
