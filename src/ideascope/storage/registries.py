"""
Source and export registries.

The source registry accumulates citations per analysis and never expires
them. The export registry tracks generated exports whose expiry is an
absolute timestamp enforced only by ``sweep``; ``get`` does not evict.
"""

import logging
import threading
from datetime import datetime
from typing import Iterable

from .models import Clock, ExportResult, SourceRef, utc_now

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Append-only mapping from analysis identifier to source references."""

    def __init__(self):
        self._sources: dict[str, list[SourceRef]] = {}
        self._lock = threading.RLock()

    def get(self, analysis_id: str) -> list[SourceRef]:
        """Return the sources for an analysis in insertion order (possibly empty)."""
        with self._lock:
            return list(self._sources.get(analysis_id, []))

    def append(self, analysis_id: str, refs: Iterable[SourceRef]) -> None:
        """
        Append references to an analysis.

        Order is preserved across calls and within the batch. Duplicates
        are kept; callers must not submit the same reference twice.
        """
        if not isinstance(analysis_id, str):
            raise TypeError(f"Analysis id must be str, got {type(analysis_id).__name__}")
        batch = list(refs)
        with self._lock:
            existing = self._sources.get(analysis_id, [])
            self._sources[analysis_id] = [*existing, *batch]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sources)


class ExportRegistry:
    """Mapping from export identifier to export result."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or utc_now
        self._exports: dict[str, ExportResult] = {}
        self._lock = threading.RLock()

    def get(self, export_id: str) -> ExportResult | None:
        """
        Return the export record, or None if unknown.

        Records past their expiry are still returned until the next sweep.
        """
        with self._lock:
            return self._exports.get(export_id)

    def set(self, export_id: str, result: ExportResult) -> None:
        """Store an export record, overwriting any previous one."""
        if not isinstance(export_id, str):
            raise TypeError(f"Export id must be str, got {type(export_id).__name__}")
        with self._lock:
            self._exports[export_id] = result

    def _expired_ids(self, now: datetime) -> list[str]:
        expired = []
        for export_id, result in self._exports.items():
            try:
                expires_at = result.expiry()
            except ValueError:
                logger.warning(
                    f"Skipping export with malformed expiry: {export_id}",
                    extra={"event": "export_expiry_invalid", "expires_at": result.expires_at},
                )
                continue
            if now >= expires_at:
                expired.append(export_id)
        return expired

    def sweep(self, now: datetime | None = None) -> int:
        """
        Delete exports whose absolute expiry has been reached.

        Records with an unparseable expiry are logged and kept.

        Returns:
            Number of records removed
        """
        now = now or self._clock()
        with self._lock:
            expired = self._expired_ids(now)
            for export_id in expired:
                del self._exports[export_id]
        return len(expired)

    def count_expired(self, now: datetime | None = None) -> int:
        """Count expired exports without removing them."""
        now = now or self._clock()
        with self._lock:
            return len(self._expired_ids(now))

    def __len__(self) -> int:
        with self._lock:
            return len(self._exports)
