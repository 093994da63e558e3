"""
Metrics endpoints.

Serves cache metrics in JSON and Prometheus formats.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from ideascope.api.dependencies import get_metrics
from ideascope.api.schemas.exceptions import NotFoundError
from ideascope.core.models import ArtifactKind
from ideascope.monitoring.metrics import CacheMetricsCollector

router = APIRouter()

PROMETHEUS_MEDIA_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get("", response_model=None)
@router.get("/", response_model=None)
async def get_metrics_summary(
    format: str = Query("json", description="Response format: 'json' or 'prometheus'"),
    collector: CacheMetricsCollector = Depends(get_metrics),
) -> dict[str, Any] | PlainTextResponse:
    """
    Cache metrics.

    Args:
        format: Response format - "json" (default) or "prometheus"
    """
    if format.lower() == "prometheus":
        return PlainTextResponse(
            content=collector.to_prometheus(), media_type=PROMETHEUS_MEDIA_TYPE
        )
    return collector.get_all_metrics()


@router.get("/prometheus", response_class=PlainTextResponse)
async def get_prometheus_metrics(
    collector: CacheMetricsCollector = Depends(get_metrics),
) -> PlainTextResponse:
    """Metrics in Prometheus exposition format."""
    return PlainTextResponse(content=collector.to_prometheus(), media_type=PROMETHEUS_MEDIA_TYPE)


@router.get("/kinds/{kind}")
async def get_kind_metrics(
    kind: str,
    collector: CacheMetricsCollector = Depends(get_metrics),
) -> dict[str, Any]:
    """Counters for one artifact kind, addressed by its value or URL slug."""
    try:
        artifact_kind = ArtifactKind(kind)
    except ValueError:
        try:
            artifact_kind = ArtifactKind.from_slug(kind)
        except ValueError:
            raise NotFoundError(f"Unknown artifact kind: {kind}") from None
    return collector.get_kind_metrics(artifact_kind)
