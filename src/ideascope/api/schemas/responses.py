"""
Pydantic response schemas for the premium API.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Response timestamp (ISO format)")
    components: dict[str, str] = Field(
        default_factory=dict, description="Status of individual components"
    )


class SourcesResponse(BaseModel):
    """Source references registered for one analysis."""

    analysis_id: str = Field(..., alias="analysisId")
    sources: list[dict[str, Any]] = Field(default_factory=list)
    count: int = Field(0, description="Number of references")

    model_config = {"populate_by_name": True}


class ErrorDetail(BaseModel):
    """Body of an error response."""

    type: str
    message: str
    detail: str | None = None


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: ErrorDetail
