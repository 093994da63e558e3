"""
Premium artifact store.

Holds one ``TTLMap`` per artifact kind together with the source and
export registries. A single instance is built at process start and
handed to route handlers; nothing here is a module-level global.
"""

import logging
from typing import Any

from ideascope.config import CacheConfig

from .models import ArtifactKind, Clock, Payload, utc_now
from .registries import ExportRegistry, SourceRegistry
from .ttl import TTLMap

logger = logging.getLogger(__name__)


class PremiumStore:
    """
    Typed registry of per-kind artifact caches.

    Example:
        store = PremiumStore()
        store.set(ArtifactKind.GTM_PLAN, "a1", {"phases": []})
        store.get(ArtifactKind.GTM_PLAN, "a1")
    """

    def __init__(self, config: CacheConfig | None = None, clock: Clock | None = None):
        """
        Initialize the store.

        Args:
            config: Cache configuration supplying default TTLs
            clock: Time source shared by every map and the export registry
        """
        self._config = config or CacheConfig()
        self._clock = clock or utc_now
        self._maps: dict[ArtifactKind, TTLMap[Payload]] = {
            kind: TTLMap(
                name=kind.value,
                default_ttl_hours=self._config.ttl_for(kind),
                clock=self._clock,
            )
            for kind in ArtifactKind
        }
        self.sources = SourceRegistry()
        self.exports = ExportRegistry(clock=self._clock)

    @property
    def config(self) -> CacheConfig:
        """Configuration the store was built with."""
        return self._config

    def now(self):
        """Current time according to the store's clock."""
        return self._clock()

    def of(self, kind: ArtifactKind) -> TTLMap[Payload]:
        """Return the map backing one artifact kind."""
        if not isinstance(kind, ArtifactKind):
            raise TypeError(f"Expected ArtifactKind, got {type(kind).__name__}")
        return self._maps[kind]

    def maps(self) -> dict[ArtifactKind, TTLMap[Payload]]:
        """All per-kind maps in enum order."""
        return dict(self._maps)

    def get(self, kind: ArtifactKind, analysis_id: str) -> Payload | None:
        """Return the cached artifact of ``kind`` for an analysis, if live."""
        return self.of(kind).get(analysis_id)

    def set(
        self,
        kind: ArtifactKind,
        analysis_id: str,
        value: Payload,
        ttl_hours: float | None = None,
    ) -> None:
        """Cache an artifact of ``kind``; ``ttl_hours`` defaults per kind."""
        self.of(kind).set(analysis_id, value, ttl_hours)
        logger.debug(
            f"Cached {kind.label} for {analysis_id}",
            extra={"event": "cache_set", "kind": kind.value, "analysis_id": analysis_id},
        )

    def sizes(self) -> dict[str, Any]:
        """Item counts per map and registry."""
        sizes: dict[str, Any] = {kind.value: len(m) for kind, m in self._maps.items()}
        sizes["sources"] = len(self.sources)
        sizes["exports"] = len(self.exports)
        return sizes
