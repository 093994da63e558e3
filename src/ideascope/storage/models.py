"""
Pydantic models for the premium analytics cache.

Defines the source-reference, export-result and statistics records held
by the storage layer.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ideascope.core.models import ArtifactKind, Clock, Payload, utc_now

__all__ = [
    "ArtifactKind",
    "CacheStats",
    "Clock",
    "ExportResult",
    "ExportStatus",
    "Payload",
    "SourceRef",
    "SourceType",
    "utc_now",
]


class SourceType(str, Enum):
    """Provenance of a cited source."""

    REDDIT = "reddit"
    WEB = "web"
    API = "api"
    INTERNAL = "internal"


class SourceRef(BaseModel):
    """Citation attached to generated premium content."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Source identifier")
    type: SourceType = Field(description="Where the source came from")
    url: str | None = Field(default=None, description="Link to the source")
    title: str = Field(description="Source title")
    excerpt: str | None = Field(default=None, description="Quoted excerpt")
    confidence: float = Field(ge=0, le=1, description="Confidence in [0, 1]")
    retrieved_at: str = Field(
        alias="retrievedAt", description="ISO timestamp of retrieval"
    )


class ExportStatus(str, Enum):
    """Status of an export job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ExportResult(BaseModel):
    """Generated downloadable export with an absolute expiry timestamp."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Export identifier")
    status: ExportStatus = Field(description="Export job status")
    download_url: str | None = Field(
        default=None, alias="downloadUrl", description="Download location"
    )
    filename: str = Field(description="Suggested file name")
    file_size: int | None = Field(
        default=None, alias="fileSize", description="Size in bytes"
    )
    created_at: str = Field(alias="createdAt", description="ISO timestamp of creation")
    expires_at: str = Field(alias="expiresAt", description="ISO timestamp of expiry")
    error: str | None = Field(default=None, description="Failure reason")

    def expiry(self) -> datetime:
        """
        Parse ``expires_at`` into an aware datetime.

        Naive timestamps are read as UTC; a trailing ``Z`` is accepted.

        Raises:
            ValueError: If the timestamp cannot be parsed
        """
        parsed = datetime.fromisoformat(self.expires_at.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class CacheStats(BaseModel):
    """Aggregate cache statistics for monitoring."""

    model_config = ConfigDict(populate_by_name=True)

    total_items: int = Field(alias="totalItems", description="Items across all stores")
    expired_items: int = Field(
        alias="expiredItems", description="Stored items already past expiry"
    )
    memory_usage: str = Field(alias="memoryUsage", description="Rough size estimate")
