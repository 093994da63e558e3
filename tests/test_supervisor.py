"""Tests for the cache supervisor."""

import asyncio
from datetime import timedelta
from unittest.mock import patch

import pytest

from ideascope.core.models import ArtifactKind
from ideascope.storage.models import ExportResult, ExportStatus, SourceRef
from ideascope.storage.store import PremiumStore
from ideascope.storage.supervisor import CacheSupervisor, SupervisorStatus, SweepReport


def _export(export_id: str, expires_at: str) -> ExportResult:
    return ExportResult(
        id=export_id,
        status=ExportStatus.COMPLETED,
        filename=f"{export_id}.json",
        created_at="2025-01-01T00:00:00+00:00",
        expires_at=expires_at,
    )


# =============================================================================
# Sweeping
# =============================================================================


class TestRunOnce:
    """Tests for a single sweep cycle."""

    def test_removes_expired_across_kinds(self, store: PremiumStore, clock) -> None:
        """Expired entries in every map are removed; live ones stay."""
        store.set(ArtifactKind.GTM_PLAN, "old", {}, ttl_hours=1)
        store.set(ArtifactKind.MARKET_SIZING, "old", {}, ttl_hours=1)
        store.set(ArtifactKind.MARKET_SIZING, "new", {}, ttl_hours=10)
        clock.advance(hours=2)

        report = CacheSupervisor(store).run_once()

        assert report.removed["gtm_plan"] == 1
        assert report.removed["market_sizing"] == 1
        assert report.total_removed == 2
        assert store.get(ArtifactKind.MARKET_SIZING, "new") == {}

    def test_sweeps_exports(self, store: PremiumStore, clock) -> None:
        """Exports past their absolute expiry are swept."""
        store.exports.set("e1", _export("e1", (clock() - timedelta(hours=1)).isoformat()))
        report = CacheSupervisor(store).run_once()
        assert report.removed["exports"] == 1
        assert store.exports.get("e1") is None

    def test_sources_never_swept(self, store: PremiumStore, clock) -> None:
        """Source references have no expiry."""
        store.sources.append(
            "a1",
            [SourceRef(id="s1", type="web", title="t", confidence=1, retrieved_at="x")],
        )
        clock.advance(hours=10_000)
        CacheSupervisor(store).run_once()
        assert len(store.sources.get("a1")) == 1

    def test_failure_in_one_kind_is_isolated(self, store: PremiumStore, clock) -> None:
        """A failing map does not stop the remaining kinds from being swept."""
        store.set(ArtifactKind.MARKET_SIZING, "old", {}, ttl_hours=1)
        clock.advance(hours=2)

        failing = store.of(ArtifactKind.KEYWORD_INTELLIGENCE)
        with patch.object(failing, "sweep", side_effect=RuntimeError("boom")):
            report = CacheSupervisor(store).run_once()

        assert report.errors == {"keyword_intelligence": "boom"}
        assert report.removed["market_sizing"] == 1
        assert "exports" in report.removed

    def test_on_sweep_callback(self, store: PremiumStore) -> None:
        """The observer receives each report."""
        reports: list[SweepReport] = []
        supervisor = CacheSupervisor(store, on_sweep=reports.append)
        supervisor.run_once()
        supervisor.run_once()
        assert len(reports) == 2
        assert supervisor.cycles == 2
        assert supervisor.last_report is reports[-1]

    def test_report_to_dict(self, store: PremiumStore) -> None:
        """Reports serialize with totals."""
        data = CacheSupervisor(store).run_once().to_dict()
        assert data["total_removed"] == 0
        assert set(data["removed"]) == {k.value for k in ArtifactKind} | {"exports"}


# =============================================================================
# Statistics
# =============================================================================


class TestCacheStats:
    """Tests for get_cache_stats."""

    def test_empty_store(self, store: PremiumStore) -> None:
        """An empty store reports zeros."""
        stats = CacheSupervisor(store).get_cache_stats()
        assert stats.total_items == 0
        assert stats.expired_items == 0
        assert stats.memory_usage == "0 KB (estimated)"

    def test_counts_maps_sources_and_exports(self, store: PremiumStore, clock) -> None:
        """Totals include artifact maps, source keys and exports."""
        store.set(ArtifactKind.GTM_PLAN, "a1", {})
        store.set(ArtifactKind.GTM_PLAN, "a2", {}, ttl_hours=1)
        store.sources.append(
            "a1", [SourceRef(id="s1", type="web", title="t", confidence=1, retrieved_at="x")]
        )
        store.exports.set("e1", _export("e1", (clock() + timedelta(minutes=30)).isoformat()))
        clock.advance(hours=2)

        stats = CacheSupervisor(store).get_cache_stats()

        assert stats.total_items == 4
        assert stats.expired_items == 2
        assert stats.memory_usage == "40 KB (estimated)"

    def test_stats_do_not_evict(self, store: PremiumStore, clock) -> None:
        """Computing statistics never removes entries; repeated calls agree."""
        store.set(ArtifactKind.GTM_PLAN, "a1", {}, ttl_hours=1)
        store.exports.set("e1", _export("e1", (clock() + timedelta(minutes=30)).isoformat()))
        clock.advance(hours=2)
        supervisor = CacheSupervisor(store)

        first = supervisor.get_cache_stats()
        second = supervisor.get_cache_stats()

        assert first == second
        assert (first.total_items, first.expired_items) == (2, 2)
        assert len(store.of(ArtifactKind.GTM_PLAN)) == 1
        assert store.exports.get("e1") is not None

    def test_malformed_export_not_counted(self, store: PremiumStore) -> None:
        """Exports with unparseable expiry count as items but not as expired."""
        store.exports.set("bad", _export("bad", "garbage"))
        stats = CacheSupervisor(store).get_cache_stats()
        assert stats.total_items == 1
        assert stats.expired_items == 0

    def test_serializes_with_aliases(self, store: PremiumStore) -> None:
        """Stats serialize with the camelCase wire names."""
        data = CacheSupervisor(store).get_cache_stats().model_dump(by_alias=True)
        assert set(data) == {"totalItems", "expiredItems", "memoryUsage"}


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    """Tests for start/stop of the periodic task."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, store: PremiumStore) -> None:
        """The supervisor runs until stopped."""
        supervisor = CacheSupervisor(store, interval_seconds=3600)
        assert supervisor.status == SupervisorStatus.STOPPED

        supervisor.start()
        assert supervisor.status == SupervisorStatus.RUNNING

        await supervisor.stop()
        assert supervisor.status == SupervisorStatus.STOPPED

    @pytest.mark.asyncio
    async def test_periodic_sweeps(self, store: PremiumStore) -> None:
        """Cycles run at the configured interval."""
        supervisor = CacheSupervisor(store, interval_seconds=0.01)
        supervisor.start()
        await asyncio.sleep(0.1)
        await supervisor.stop()
        assert supervisor.cycles >= 2

    @pytest.mark.asyncio
    async def test_failed_cycle_keeps_running(self, store: PremiumStore) -> None:
        """An exception inside a cycle does not kill the task."""
        supervisor = CacheSupervisor(store, interval_seconds=0.01)
        with patch.object(supervisor, "run_once", side_effect=RuntimeError("boom")):
            supervisor.start()
            await asyncio.sleep(0.05)
            assert supervisor.status == SupervisorStatus.RUNNING
        await supervisor.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, store: PremiumStore) -> None:
        """Starting twice keeps one task."""
        supervisor = CacheSupervisor(store, interval_seconds=3600)
        supervisor.start()
        task = supervisor._task
        supervisor.start()
        assert supervisor._task is task
        await supervisor.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, store: PremiumStore) -> None:
        """Stopping an idle supervisor is a no-op."""
        await CacheSupervisor(store).stop()

    def test_interval_from_config(self, store: PremiumStore) -> None:
        """The default interval is one hour."""
        supervisor = CacheSupervisor(store)
        assert supervisor.interval_seconds == 3600
        assert store.config.sweep_interval_ms == 3_600_000
        assert supervisor.kinds() == list(ArtifactKind)
