"""In-process, content-addressed snapshot store bounded by count and bytes.

Snapshots are keyed by the content fingerprint supplied by the caller; the
store never hashes internally.  Recording content that is already stored
returns the existing entry untouched, so identical data shares one
snapshot.

Design notes:
    * Two bounds apply at once: ``max_entries`` and ``max_bytes`` (sum of
      payload sizes).  An insert that would break either bound first evicts
      other entries, oldest ``created_at`` first.  Eviction stops once the
      store is empty, so a single snapshot larger than ``max_bytes`` is
      still accepted.
    * ``created_at`` is set once at record time and is never refreshed by
      ``get()``.  Eviction is therefore creation order (FIFO), not access
      recency.
    * Thread-safe via a single lock held by every read and write, so a
      reader can never observe a half-evicted store.
    * Pure process-lifetime state.  Nothing is persisted.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pandas as pd

from drift_engine.config import DEFAULT_MAX_BYTES, DEFAULT_MAX_ENTRIES
from drift_engine.errors import ConfigurationError, MissingColumnError
from drift_engine.models.snapshot import Snapshot, SnapshotInfo

if TYPE_CHECKING:
    from drift_engine.config import DriftSettings

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def measure_payload_size(table: pd.DataFrame) -> int:
    """Return the in-memory size of *table* in bytes, index included."""
    return int(table.memory_usage(index=True, deep=True).sum())


# ---------------------------------------------------------------------------
# SnapshotStore
# ---------------------------------------------------------------------------


class SnapshotStore:
    """Fingerprint-keyed snapshot cache with count and memory bounds.

    Parameters
    ----------
    max_entries:
        Maximum number of snapshots to hold.  Must be positive.
    max_bytes:
        Maximum aggregate payload size in bytes.  Must be positive.
    clock:
        Returns the ``created_at`` timestamp for new snapshots.  Defaults
        to the current UTC time.
    """

    def __init__(
        self,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_bytes: int = DEFAULT_MAX_BYTES,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if max_entries <= 0:
            raise ConfigurationError(f"max_entries must be positive, got {max_entries}")
        if max_bytes <= 0:
            raise ConfigurationError(f"max_bytes must be positive, got {max_bytes}")

        self._entries: dict[str, Snapshot] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._max_bytes = max_bytes
        self._clock = clock or _utc_now
        self._total_bytes = 0

        # Stats
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @classmethod
    def from_settings(cls, settings: DriftSettings, **kwargs: Any) -> SnapshotStore:
        """Build a store bounded by the limits in *settings*."""
        return cls(max_entries=settings.max_entries, max_bytes=settings.max_bytes, **kwargs)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        fingerprint: str,
        table: pd.DataFrame,
        label: str | None = None,
        *,
        key_columns: Sequence[str] = (),
    ) -> Snapshot:
        """Capture *table* under *fingerprint*, evicting older entries as needed.

        Parameters
        ----------
        fingerprint:
            Content fingerprint of *table*, as produced by
            :func:`~drift_engine.hashing.fingerprint_of`.
        table:
            The table to capture.  A deep copy is stored.
        label:
            Optional human-readable label.
        key_columns:
            Key columns attached to *table* by the caller, if any.

        Returns
        -------
        Snapshot
            The new entry, or the existing one when *fingerprint* is already
            stored (it is neither replaced nor re-timestamped).

        Raises
        ------
        MissingColumnError
            If a key column is absent from *table*.  The store is left
            unchanged.
        """
        with self._lock:
            existing = self._entries.get(fingerprint)
            if existing is not None:
                logger.debug("Snapshot already recorded: fp=%s", fingerprint[:12])
                return existing

            # Validated before any eviction so that a failure leaves the
            # store untouched.
            missing = [name for name in key_columns if name not in table.columns]
            if missing:
                raise MissingColumnError(missing, where="table")

            payload = table.copy(deep=True)
            snapshot = Snapshot(
                fingerprint=fingerprint,
                payload=payload,
                payload_size=measure_payload_size(payload),
                label=label,
                key_columns=tuple(key_columns),
                created_at=self._clock(),
            )

            evicted = 0
            while self._entries and (
                len(self._entries) >= self._max_entries
                or self._total_bytes + snapshot.payload_size > self._max_bytes
            ):
                self._evict_oldest()
                evicted += 1

            self._entries[fingerprint] = snapshot
            self._total_bytes += snapshot.payload_size

            if snapshot.payload_size > self._max_bytes:
                logger.warning(
                    "Snapshot fp=%s is %d bytes, above max_bytes=%d; stored on its own",
                    fingerprint[:12],
                    snapshot.payload_size,
                    self._max_bytes,
                )

            logger.debug(
                "Snapshot recorded: fp=%s size=%d evicted=%d entries=%d bytes=%d",
                fingerprint[:12],
                snapshot.payload_size,
                evicted,
                len(self._entries),
                self._total_bytes,
            )
        return snapshot

    def get(self, fingerprint: str) -> Snapshot | None:
        """Look up a snapshot.  Returns ``None`` when absent; never reorders."""
        with self._lock:
            snapshot = self._entries.get(fingerprint)
            if snapshot is None:
                self._misses += 1
                logger.debug("Snapshot miss: fp=%s", fingerprint[:12])
                return None
            self._hits += 1
            return snapshot

    def remove(self, fingerprint: str) -> bool:
        """Remove a single snapshot.  Returns ``True`` if it was present."""
        with self._lock:
            removed = self._entries.pop(fingerprint, None)
            if removed is not None:
                self._total_bytes -= removed.payload_size
        return removed is not None

    def clear_all(self) -> int:
        """Remove every snapshot.  Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._total_bytes = 0
        logger.info("Cleared %d snapshot(s)", count)
        return count

    def list(self) -> Sequence[SnapshotInfo]:
        """Return payload-free summaries of all snapshots, oldest first."""
        with self._lock:
            snapshots = sorted(self._entries.values(), key=lambda s: s.created_at)
            return [snapshot.info() for snapshot in snapshots]

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @property
    def stats(self) -> dict[str, Any]:
        """Return occupancy and hit/miss statistics."""
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "bytes": self._total_bytes,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": round(self._hits / lookups, 4) if lookups > 0 else 0.0,
                "max_entries": self._max_entries,
                "max_bytes": self._max_bytes,
            }

    def __len__(self) -> int:
        return self.entry_count

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._entries

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _evict_oldest(self) -> None:
        """Remove the entry with the smallest ``created_at``.

        Ties go to the earliest inserted entry.  Must be called while
        holding ``self._lock``.
        """
        oldest = min(self._entries.values(), key=lambda s: s.created_at)
        del self._entries[oldest.fingerprint]
        self._total_bytes -= oldest.payload_size
        self._evictions += 1
        logger.debug(
            "Evicted snapshot: fp=%s created_at=%s size=%d",
            oldest.fingerprint[:12],
            oldest.created_at.isoformat(),
            oldest.payload_size,
        )
