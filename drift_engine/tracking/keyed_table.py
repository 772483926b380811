"""Explicit bookkeeping context for a table under drift tracking.

:class:`KeyedTable` pairs a :class:`pandas.DataFrame` with the state the
drift engine needs across transformation steps: the key columns, the
fingerprint of the last stamped snapshot, and whether the table is
watched.  The frame itself is never annotated; every transformation
returns a new ``KeyedTable``.

Usage::

    store = SnapshotStore()
    orders = KeyedTable.key(frame, "order_id").watch(store)
    orders = orders.pipe(lambda df: df[df["amount"] > 0])
    report = orders.check_drift()      # diff of the last step only
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import pandas as pd

from drift_engine.errors import InvalidKeyError, MissingColumnError
from drift_engine.hashing.fingerprint import fingerprint_of

if TYPE_CHECKING:
    from drift_engine.cache.snapshot_store import SnapshotStore
    from drift_engine.models.drift import DriftCheck, DriftReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class KeyedTable:
    """A frame plus its key, snapshot reference and watch state.

    Attributes
    ----------
    frame:
        The table.  Treated as immutable.
    key_columns:
        Ordered key columns, empty when the table is unkeyed.
    snapshot_ref:
        Fingerprint of the snapshot this table is compared against.
    watched:
        When ``True``, :meth:`pipe` stamps the table before every step.
    store:
        The store used for automatic stamps while watched.
    """

    frame: pd.DataFrame
    key_columns: tuple[str, ...] = ()
    snapshot_ref: str | None = None
    watched: bool = False
    store: SnapshotStore | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        keys = tuple(self.key_columns)
        missing = [name for name in keys if name not in self.frame.columns]
        if missing:
            raise MissingColumnError(missing, where="data")
        object.__setattr__(self, "key_columns", keys)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @classmethod
    def key(cls, frame: pd.DataFrame, *columns: str, validate: bool = True) -> KeyedTable:
        """Attach *columns* as the key of *frame*.

        With *validate*, a non-unique key is logged as a warning but still
        attached.
        """
        if not columns:
            raise InvalidKeyError("At least one key column must be specified.")

        table = cls(frame=frame, key_columns=columns)
        if validate and not table.key_is_unique():
            logger.warning("Key %s is not unique", list(columns))
        return table

    @property
    def has_key(self) -> bool:
        return bool(self.key_columns)

    def key_is_unique(self) -> bool:
        if not self.key_columns:
            return False
        return not self.frame.duplicated(subset=list(self.key_columns)).any()

    def unkey(self) -> KeyedTable:
        return replace(self, key_columns=())

    def fingerprint(self) -> str:
        return fingerprint_of(self.frame)

    def with_frame(self, frame: pd.DataFrame) -> KeyedTable:
        """Carry this table's bookkeeping onto a transformed *frame*.

        The key is dropped when any key column is gone, or when the row
        count changed and the key is no longer unique.
        """
        keys = self.key_columns
        if keys:
            dropped = [name for name in keys if name not in frame.columns]
            if dropped:
                logger.warning("Key column(s) removed by transformation: %s", dropped)
                keys = ()
            elif len(frame) != len(self.frame) and frame.duplicated(subset=list(keys)).any():
                logger.debug("Key %s no longer unique after transformation; unkeying", list(keys))
                keys = ()
        return replace(self, frame=frame, key_columns=keys)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def stamp(self, store: SnapshotStore, label: str | None = None) -> KeyedTable:
        """Record the current content in *store* and reference it."""
        fp = fingerprint_of(self.frame)
        store.record(fp, self.frame, label, key_columns=self.key_columns)
        logger.info(
            "Snapshot committed: %s...",
            fp[:8],
            extra={"snapshot": {"fingerprint": fp, "label": label, "rows": len(self.frame)}},
        )
        return replace(self, snapshot_ref=fp)

    def clear_snapshot(self, store: SnapshotStore | None = None, *, purge: bool = False) -> KeyedTable:
        """Drop the snapshot reference, and with *purge* the stored snapshot too."""
        if purge:
            target = store if store is not None else self.store
            if target is None:
                raise ValueError("purge=True requires a snapshot store")
            if self.snapshot_ref is not None:
                target.remove(self.snapshot_ref)
        return replace(self, snapshot_ref=None)

    def watch(self, store: SnapshotStore, label: str | None = None) -> KeyedTable:
        """Stamp a baseline and stamp again before every :meth:`pipe` step."""
        if not self.has_key:
            raise InvalidKeyError("watch() requires keyed data. Use KeyedTable.key() first.")
        stamped = self.stamp(store, label)
        return replace(stamped, watched=True, store=store)

    def unwatch(self) -> KeyedTable:
        return replace(self, watched=False, store=None)

    def pipe(self, func: Callable[..., pd.DataFrame], *args: Any, **kwargs: Any) -> KeyedTable:
        """Apply ``func(frame, *args, **kwargs)`` and carry bookkeeping forward.

        When watched, the pre-transformation state is stamped first, so a
        drift check on the result reports this step only.
        """
        source = self
        if self.watched and self.store is not None:
            source = self.stamp(self.store)

        result = func(source.frame, *args, **kwargs)
        if not isinstance(result, pd.DataFrame):
            raise TypeError(f"pipe() function must return a DataFrame, got {type(result).__name__}")
        return source.with_frame(result)

    # ------------------------------------------------------------------
    # Drift
    # ------------------------------------------------------------------

    def check(self, store: SnapshotStore | None = None, reference: str | None = None) -> DriftCheck:
        from drift_engine.drift.reporter import DriftReporter

        target = store if store is not None else self.store
        if target is None:
            raise ValueError("A snapshot store is required to check drift")
        return DriftReporter(target).check(self, reference)

    def check_drift(self, store: SnapshotStore | None = None, reference: str | None = None) -> DriftReport | None:
        """Return the drift report against the referenced snapshot, or ``None``."""
        return self.check(store, reference).report
