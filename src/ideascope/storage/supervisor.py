"""
Cache Supervisor - periodic sweeping of the premium store.

Runs as a cancellable asyncio task owned by the application lifespan:
``start()`` on boot, ``stop()`` on shutdown. Each cycle sweeps every
artifact map in kind order and then the export registry. A failure while
sweeping one kind is logged and does not stop the remaining kinds.

``run_once()`` performs a single cycle synchronously so tests can sweep
deterministically with an injected clock.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from .models import ArtifactKind, CacheStats
from .store import PremiumStore

logger = logging.getLogger(__name__)


class SupervisorStatus(Enum):
    """Status of the supervisor task."""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class SweepReport:
    """Outcome of one sweep cycle."""

    started_at: datetime
    removed: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total_removed(self) -> int:
        """Entries removed across all stores."""
        return sum(self.removed.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "started_at": self.started_at.isoformat(),
            "removed": dict(self.removed),
            "total_removed": self.total_removed,
            "errors": dict(self.errors),
        }


# Observer hook so metrics can count evictions without the supervisor knowing about them.
SweepCallback = Callable[[SweepReport], None]


class CacheSupervisor:
    """
    Background reaper and statistics reporter for a ``PremiumStore``.

    Example:
        supervisor = CacheSupervisor(store, interval_seconds=3600)
        supervisor.start()
        ...
        await supervisor.stop()
    """

    def __init__(
        self,
        store: PremiumStore,
        interval_seconds: float | None = None,
        on_sweep: SweepCallback | None = None,
    ):
        """
        Initialize the supervisor.

        Args:
            store: Store to maintain
            interval_seconds: Sweep interval, defaults to the store's config
            on_sweep: Optional callback invoked with each cycle's report
        """
        self._store = store
        self._interval = interval_seconds or store.config.sweep_interval_seconds
        self._on_sweep = on_sweep
        self._task: asyncio.Task | None = None
        self._last_report: SweepReport | None = None
        self._cycles = 0

    @property
    def status(self) -> SupervisorStatus:
        """Whether the periodic task is active."""
        if self._task is not None and not self._task.done():
            return SupervisorStatus.RUNNING
        return SupervisorStatus.STOPPED

    @property
    def interval_seconds(self) -> float:
        """Seconds between sweep cycles."""
        return self._interval

    @property
    def last_report(self) -> SweepReport | None:
        """Report of the most recent cycle, if any."""
        return self._last_report

    @property
    def cycles(self) -> int:
        """Number of completed sweep cycles."""
        return self._cycles

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self.status == SupervisorStatus.RUNNING:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="ideascope-cache-supervisor"
        )
        logger.info(f"Cache supervisor started (interval={self._interval}s)")

    async def stop(self) -> None:
        """Cancel the periodic task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Cache supervisor stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception:
                # Keep the reaper alive; the next cycle retries.
                logger.exception("Cache sweep cycle failed")

    def run_once(self, now: datetime | None = None) -> SweepReport:
        """
        Sweep every artifact map, then the export registry.

        Args:
            now: Reference instant, defaults to the store's clock

        Returns:
            SweepReport with per-store removal counts and isolated errors
        """
        now = now or self._store.now()
        report = SweepReport(started_at=now)

        for kind, ttl_map in self._store.maps().items():
            try:
                report.removed[kind.value] = ttl_map.sweep(now)
            except Exception as e:
                report.errors[kind.value] = str(e)
                logger.error(
                    f"Sweep failed for {kind.label}: {e}",
                    extra={"event": "cache_sweep_failed", "kind": kind.value},
                    exc_info=True,
                )

        try:
            report.removed["exports"] = self._store.exports.sweep(now)
        except Exception as e:
            report.errors["exports"] = str(e)
            logger.error(
                f"Sweep failed for exports: {e}",
                extra={"event": "cache_sweep_failed", "kind": "exports"},
                exc_info=True,
            )

        self._cycles += 1
        self._last_report = report
        logger.info(
            f"Cache sweep removed {report.total_removed} expired item(s)",
            extra={
                "event": "cache_sweep",
                "removed": report.total_removed,
                "errors": len(report.errors),
            },
        )
        if self._on_sweep is not None:
            self._on_sweep(report)
        return report

    def get_cache_stats(self, now: datetime | None = None) -> CacheStats:
        """
        Aggregate item counts without evicting anything.

        ``total_items`` covers every artifact map plus the source and
        export registries; ``expired_items`` counts stored entries and
        exports already past expiry.
        """
        now = now or self._store.now()
        total_items = 0
        expired_items = 0

        for ttl_map in self._store.maps().values():
            total_items += len(ttl_map)
            expired_items += ttl_map.count_expired(now)

        total_items += len(self._store.sources) + len(self._store.exports)
        expired_items += self._store.exports.count_expired(now)

        per_item_kb = self._store.config.memory_estimate_kb_per_item
        memory_usage = f"{round(total_items * per_item_kb)} KB (estimated)"

        return CacheStats(
            total_items=total_items,
            expired_items=expired_items,
            memory_usage=memory_usage,
        )

    def kinds(self) -> list[ArtifactKind]:
        """Artifact kinds swept each cycle, in order."""
        return list(self._store.maps())
