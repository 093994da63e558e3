"""
Premium analysis endpoints.

Leaf artifacts are generated on a cache miss and returned from the cache
otherwise. Read-only lookups never generate.
"""

import json
import logging
import secrets
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError as PydanticValidationError

from ideascope.api.dependencies import get_gateway, get_store, get_supervisor
from ideascope.api.schemas.exceptions import NotFoundError, ValidationError, field_errors
from ideascope.api.schemas.requests import (
    GENERATION_REQUESTS,
    ExportRequest,
    PremiumAnalysisRequest,
    SourcesAppendRequest,
)
from ideascope.api.schemas.responses import SourcesResponse
from ideascope.core.models import ArtifactKind, Payload
from ideascope.generation.gateway import GenerationGateway
from ideascope.storage.models import ExportResult, ExportStatus
from ideascope.storage.store import PremiumStore
from ideascope.storage.supervisor import CacheSupervisor

router = APIRouter()
logger = logging.getLogger(__name__)

# Export section name -> cached artifact it is read from
EXPORT_SECTIONS = {
    "keywords": ArtifactKind.KEYWORD_INTELLIGENCE,
    "competitors": ArtifactKind.COMPETITOR_MATRIX,
    "gtm": ArtifactKind.GTM_PLAN,
    "market": ArtifactKind.MARKET_SIZING,
}


def _resolve_kind(slug: str) -> ArtifactKind:
    try:
        return ArtifactKind.from_slug(slug)
    except ValueError:
        raise NotFoundError(f"Unknown premium artifact: {slug}") from None


def _sources_response(store: PremiumStore, analysis_id: str) -> SourcesResponse:
    refs = store.sources.get(analysis_id)
    return SourcesResponse(
        analysis_id=analysis_id,
        sources=[ref.model_dump(mode="json", by_alias=True, exclude_none=True) for ref in refs],
        count=len(refs),
    )


@router.get("/cache-stats")
async def cache_stats(
    supervisor: CacheSupervisor = Depends(get_supervisor),
) -> dict[str, Any]:
    """
    Aggregate cache statistics.

    Returns:
        totalItems, expiredItems and memoryUsage across every store
    """
    return supervisor.get_cache_stats().model_dump(by_alias=True)


@router.post("/analysis")
async def create_premium_analysis(
    body: PremiumAnalysisRequest,
    gateway: GenerationGateway = Depends(get_gateway),
) -> Payload:
    """
    Build the aggregate premium analysis.

    Every component is read through the cache, so components generated
    earlier are reused. The aggregate itself is cached for 48 hours.
    """
    try:
        components = body.component_params()
    except PydanticValidationError as e:
        raise ValidationError(field_errors(e.errors())) from e
    return await gateway.get_premium_analysis(body.analysis_id, components)


@router.get("/sources/{analysis_id}", response_model=SourcesResponse)
async def get_sources(
    analysis_id: str,
    store: PremiumStore = Depends(get_store),
) -> SourcesResponse:
    """Source references collected for an analysis, in insertion order."""
    return _sources_response(store, analysis_id)


@router.post("/sources/{analysis_id}", response_model=SourcesResponse)
async def append_sources(
    analysis_id: str,
    body: SourcesAppendRequest,
    store: PremiumStore = Depends(get_store),
) -> SourcesResponse:
    """Append source references to an analysis."""
    store.sources.append(analysis_id, body.sources)
    return _sources_response(store, analysis_id)


@router.post("/export")
async def create_export(
    body: ExportRequest,
    store: PremiumStore = Depends(get_store),
) -> dict[str, Any]:
    """
    Assemble cached sections into an export valid for 24 hours.

    Sections that are not cached are left out of the export.
    """
    export_data: dict[str, Payload] = {}
    for section in body.sections:
        kind = EXPORT_SECTIONS.get(section)
        if kind is None:
            continue
        payload = store.get(kind, body.analysis_id)
        if payload is not None:
            export_data[section] = payload

    now = store.now()
    export_id = f"export_{int(now.timestamp() * 1000)}_{secrets.token_hex(5)}"
    fmt = body.type.value
    result = ExportResult(
        id=export_id,
        status=ExportStatus.COMPLETED,
        download_url=f"/api/premium/export/{export_id}/download",
        filename=f"premium_analysis_{body.analysis_id}_{fmt}.{fmt}",
        file_size=len(json.dumps(export_data, separators=(",", ":"))),
        created_at=now.isoformat(),
        expires_at=(now + timedelta(hours=store.config.export_ttl_hours)).isoformat(),
    )
    store.exports.set(export_id, result)
    logger.info(
        f"Export {export_id} created with sections {sorted(export_data)}",
        extra={"event": "export_created", "export_id": export_id},
    )
    return result.model_dump(mode="json", by_alias=True)


@router.get("/export/{export_id}")
async def get_export(
    export_id: str,
    store: PremiumStore = Depends(get_store),
) -> dict[str, Any]:
    """Registered export; expired exports remain until the next sweep."""
    result = store.exports.get(export_id)
    if result is None:
        raise NotFoundError(f"Export not found: {export_id}")
    return result.model_dump(mode="json", by_alias=True)


@router.post("/{slug}")
async def generate_artifact(
    slug: str,
    body: dict[str, Any] = Body(...),
    gateway: GenerationGateway = Depends(get_gateway),
) -> Payload:
    """
    Return the cached artifact or generate and cache a new one.

    The request body depends on the artifact kind; see the request
    schemas in ``ideascope.api.schemas.requests``.
    """
    kind = _resolve_kind(slug)
    schema = GENERATION_REQUESTS.get(kind)
    if schema is None:
        raise NotFoundError(f"Unknown premium artifact: {slug}")
    try:
        request = schema.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(field_errors(e.errors())) from e
    return await gateway.get_or_generate(
        kind, request.analysis_id, request.generation_params()
    )


@router.get("/{slug}/{analysis_id}")
async def get_artifact(
    slug: str,
    analysis_id: str,
    gateway: GenerationGateway = Depends(get_gateway),
) -> Payload:
    """Cached artifact for an analysis; 404 when absent or expired."""
    kind = _resolve_kind(slug)
    payload = gateway.get_cached(kind, analysis_id)
    if payload is None:
        raise NotFoundError(f"No cached {kind.label} for analysis {analysis_id}")
    return payload


@router.get("/{slug}")
async def get_artifact_by_query(
    slug: str,
    analysis_id: str | None = Query(None, alias="analysisId"),
    gateway: GenerationGateway = Depends(get_gateway),
) -> Payload:
    """Same lookup as above with the analysis id in the query string."""
    if not analysis_id:
        raise ValidationError({"analysisId": "Field required"})
    return await get_artifact(slug, analysis_id, gateway)
