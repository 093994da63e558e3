"""
IdeaScope Storage Module.

In-memory, TTL-based cache of premium artifacts keyed by analysis
identifier, plus the source and export registries and the background
supervisor that sweeps them.
"""

from .models import (
    ArtifactKind,
    CacheStats,
    ExportResult,
    ExportStatus,
    SourceRef,
    SourceType,
)
from .registries import ExportRegistry, SourceRegistry
from .store import PremiumStore
from .supervisor import CacheSupervisor, SupervisorStatus, SweepReport
from .ttl import CacheEnvelope, TTLMap

__all__ = [
    # Models
    "ArtifactKind",
    "CacheStats",
    "ExportResult",
    "ExportStatus",
    "SourceRef",
    "SourceType",
    # Caches
    "CacheEnvelope",
    "TTLMap",
    "PremiumStore",
    # Registries
    "SourceRegistry",
    "ExportRegistry",
    # Supervisor
    "CacheSupervisor",
    "SupervisorStatus",
    "SweepReport",
]
