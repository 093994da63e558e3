"""
Metrics collection for the premium cache.

Provides:
- Cache hit/miss counters per artifact kind
- Generation success/failure counters and timings
- Single-flight wait counts
- Sweep eviction totals
- Prometheus-style export
"""

import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from ideascope.core.models import ArtifactKind
from ideascope.storage.supervisor import SweepReport

logger = logging.getLogger(__name__)


@dataclass
class KindMetrics:
    """Counters for a single artifact kind."""

    kind: str
    hits: int = 0
    misses: int = 0
    generations: int = 0
    generation_failures: int = 0
    shared_waits: int = 0
    evictions: int = 0
    total_generation_time_ms: float = 0
    last_generated_at: str | None = None

    @property
    def hit_rate(self) -> float:
        """Hit rate as percentage of lookups."""
        lookups = self.hits + self.misses
        if lookups == 0:
            return 0.0
        return (self.hits / lookups) * 100

    @property
    def average_generation_time_ms(self) -> float:
        """Mean duration of successful generations."""
        if self.generations == 0:
            return 0.0
        return self.total_generation_time_ms / self.generations

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["hit_rate"] = round(self.hit_rate, 2)
        data["average_generation_time_ms"] = round(self.average_generation_time_ms, 2)
        return data


class CacheMetricsCollector:
    """
    Thread-safe collector of cache and generation metrics.

    One collector belongs to each application context, so tests get
    isolated counters.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._kinds: dict[ArtifactKind, KindMetrics] = {
            kind: KindMetrics(kind=kind.value) for kind in ArtifactKind
        }
        self._export_evictions = 0
        self._sweep_cycles = 0
        self._started_at = datetime.now(timezone.utc).isoformat()

    def record_hit(self, kind: ArtifactKind) -> None:
        """Record a cache hit."""
        with self._lock:
            self._kinds[kind].hits += 1

    def record_miss(self, kind: ArtifactKind) -> None:
        """Record a cache miss."""
        with self._lock:
            self._kinds[kind].misses += 1

    def record_shared_wait(self, kind: ArtifactKind) -> None:
        """Record a request that joined an in-flight generation."""
        with self._lock:
            self._kinds[kind].shared_waits += 1

    def record_generation(
        self, kind: ArtifactKind, duration_ms: float, success: bool
    ) -> None:
        """Record the outcome of one generation attempt."""
        with self._lock:
            metrics = self._kinds[kind]
            if success:
                metrics.generations += 1
                metrics.total_generation_time_ms += duration_ms
                metrics.last_generated_at = datetime.now(timezone.utc).isoformat()
            else:
                metrics.generation_failures += 1

    def record_sweep(self, report: SweepReport) -> None:
        """Add the evictions of one sweep cycle."""
        with self._lock:
            self._sweep_cycles += 1
            for name, removed in report.removed.items():
                if name == "exports":
                    self._export_evictions += removed
                    continue
                self._kinds[ArtifactKind(name)].evictions += removed

    def get_kind_metrics(self, kind: ArtifactKind | None = None) -> dict[str, Any]:
        """Metrics for one kind, or all kinds keyed by kind value."""
        with self._lock:
            if kind is not None:
                return self._kinds[kind].to_dict()
            return {k.value: m.to_dict() for k, m in self._kinds.items()}

    def get_all_metrics(self) -> dict[str, Any]:
        """All metrics as a dictionary."""
        kinds = self.get_kind_metrics()
        with self._lock:
            totals = {
                "hits": sum(m.hits for m in self._kinds.values()),
                "misses": sum(m.misses for m in self._kinds.values()),
                "generations": sum(m.generations for m in self._kinds.values()),
                "generation_failures": sum(
                    m.generation_failures for m in self._kinds.values()
                ),
                "evictions": sum(m.evictions for m in self._kinds.values())
                + self._export_evictions,
                "sweep_cycles": self._sweep_cycles,
            }
            return {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "started_at": self._started_at,
                "totals": totals,
                "kinds": kinds,
            }

    def to_prometheus(self) -> str:
        """
        Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string
        """
        with self._lock:
            lines = [
                "# HELP ideascope_cache_sweep_cycles_total Completed sweep cycles",
                "# TYPE ideascope_cache_sweep_cycles_total counter",
                f"ideascope_cache_sweep_cycles_total {self._sweep_cycles}",
                "# HELP ideascope_export_evictions_total Exports removed by sweeps",
                "# TYPE ideascope_export_evictions_total counter",
                f"ideascope_export_evictions_total {self._export_evictions}",
            ]
            series = (
                ("hits", "Cache hits"),
                ("misses", "Cache misses"),
                ("generations", "Successful generations"),
                ("generation_failures", "Failed generations"),
                ("shared_waits", "Requests served by an in-flight generation"),
                ("evictions", "Entries removed by sweeps"),
            )
            for attr, help_text in series:
                name = f"ideascope_cache_{attr}_total"
                lines.append(f"# HELP {name} {help_text}")
                lines.append(f"# TYPE {name} counter")
                for kind, metrics in self._kinds.items():
                    lines.append(f'{name}{{kind="{kind.value}"}} {getattr(metrics, attr)}')

        return "\n".join(lines) + "\n"

    def reset(self) -> None:
        """Reset all counters."""
        with self._lock:
            self._kinds = {kind: KindMetrics(kind=kind.value) for kind in ArtifactKind}
            self._export_evictions = 0
            self._sweep_cycles = 0
        logger.info("Cache metrics reset")
