"""
Health check endpoints.

Reports supervisor state, cache occupancy and the generation mode.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from ideascope.api.dependencies import get_context
from ideascope.api.schemas.responses import HealthResponse
from ideascope.context import PremiumContext
from ideascope.generation.gateway import ArtifactGenerator
from ideascope.storage.supervisor import SupervisorStatus
from ideascope.version import __version__

router = APIRouter()
logger = logging.getLogger(__name__)


def _generation_mode(context: PremiumContext) -> str:
    generator = context.gateway.generator
    if isinstance(generator, ArtifactGenerator):
        return "llm" if generator.uses_llm else "heuristic"
    return "custom"


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse)
async def health_check(context: PremiumContext = Depends(get_context)) -> HealthResponse:
    """
    Health of the premium cache.

    The status is "degraded" while the cache supervisor is not running,
    since expired entries are then only removed on read.
    """
    supervisor = context.supervisor
    running = supervisor.status is SupervisorStatus.RUNNING
    stats = supervisor.get_cache_stats()

    components = {
        "supervisor": f"{supervisor.status.value} ({supervisor.cycles} sweeps)",
        "cache": f"{stats.total_items} items, {stats.expired_items} expired",
        "generation": _generation_mode(context),
    }
    if not running:
        logger.warning("Cache supervisor is not running")

    return HealthResponse(
        status="healthy" if running else "degraded",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        components=components,
    )


@router.get("/ping")
async def ping() -> dict[str, str]:
    """Simple ping endpoint for load balancer checks."""
    return {"pong": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
async def readiness(context: PremiumContext = Depends(get_context)) -> dict[str, Any]:
    """
    Readiness check for container orchestration.

    Ready once the cache supervisor is sweeping.
    """
    supervisor = context.supervisor
    ready = supervisor.status is SupervisorStatus.RUNNING
    last_report = supervisor.last_report
    return {
        "ready": ready,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "supervisor": {"ready": ready, "status": supervisor.status.value},
            "last_sweep": last_report.to_dict() if last_report else None,
        },
    }


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness check; always succeeds while the process is alive."""
    return {
        "alive": "true",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
