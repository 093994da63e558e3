"""
TTL envelope and the generic expiring map built on it.

Every premium artifact kind is cached in its own ``TTLMap``. Reads evict
stale entries as a side effect so expired data is never returned, even
when the periodic sweep has not run yet.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generic, TypeVar

from .models import Clock, utc_now

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEnvelope(Generic[V]):
    """A value that is valid until ``expires_at``."""

    data: V
    created_at: datetime
    expires_at: datetime

    @classmethod
    def wrap(cls, value: V, ttl_hours: float, now: datetime) -> "CacheEnvelope[V]":
        """
        Wrap a value with a relative time-to-live.

        A zero or negative TTL produces an envelope that is already
        expired instead of raising.

        Args:
            value: Payload to cache
            ttl_hours: Time-to-live in hours
            now: Creation instant

        Returns:
            New envelope
        """
        return cls(
            data=value,
            created_at=now,
            expires_at=now + timedelta(hours=ttl_hours),
        )

    def is_expired(self, now: datetime) -> bool:
        """Return True once ``now`` reaches expiry; pure and repeatable."""
        if self.expires_at <= self.created_at:
            return True
        return now >= self.expires_at


class TTLMap(Generic[V]):
    """
    Expiring map from analysis identifier to a cached payload.

    Holds at most one envelope per key; ``set`` replaces, never merges.
    Every read-modify-write runs under a lock, so the map is safe to use
    from the event loop and from worker threads alike.
    """

    def __init__(
        self,
        name: str,
        default_ttl_hours: float = 24,
        clock: Clock | None = None,
    ):
        """
        Initialize the map.

        Args:
            name: Name used in log records
            default_ttl_hours: TTL applied when ``set`` is given none
            clock: Time source, defaults to the UTC wall clock
        """
        self.name = name
        self.default_ttl_hours = default_ttl_hours
        self._clock = clock or utc_now
        self._entries: dict[str, CacheEnvelope[V]] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Cache key must be str, got {type(key).__name__}")

    def get(self, key: str) -> V | None:
        """
        Return the cached payload, or None when missing or expired.

        An expired entry is deleted as part of the read.
        """
        self._check_key(key)
        with self._lock:
            envelope = self._entries.get(key)
            if envelope is None:
                return None
            if envelope.is_expired(self._clock()):
                del self._entries[key]
                logger.debug(f"Evicted expired {self.name} entry on read: {key}")
                return None
            return envelope.data

    def set(self, key: str, value: V, ttl_hours: float | None = None) -> None:
        """
        Store a payload under a fresh envelope, replacing any previous one.

        Args:
            key: Analysis identifier
            value: Payload to cache
            ttl_hours: Time-to-live in hours, defaults to ``default_ttl_hours``
        """
        self._check_key(key)
        ttl = self.default_ttl_hours if ttl_hours is None else ttl_hours
        with self._lock:
            self._entries[key] = CacheEnvelope.wrap(value, ttl, self._clock())

    def envelope(self, key: str) -> CacheEnvelope[V] | None:
        """Return the raw envelope without any expiry check or eviction."""
        self._check_key(key)
        with self._lock:
            return self._entries.get(key)

    def sweep(self, now: datetime | None = None) -> int:
        """
        Delete every expired entry.

        Args:
            now: Reference instant, defaults to the map's clock

        Returns:
            Number of entries removed
        """
        now = now or self._clock()
        with self._lock:
            expired = [k for k, env in self._entries.items() if env.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def count_expired(self, now: datetime | None = None) -> int:
        """Count expired entries without removing them."""
        now = now or self._clock()
        with self._lock:
            return sum(1 for env in self._entries.values() if env.is_expired(now))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __repr__(self) -> str:
        return f"TTLMap(name={self.name!r}, size={len(self)})"
