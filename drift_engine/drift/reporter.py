"""Drift checks: compare a current table against a recorded snapshot.

The reporter resolves a reference fingerprint, looks it up in a
:class:`~drift_engine.cache.SnapshotStore`, fingerprints the current
table and then either runs a key-aligned cell diff (both sides carry the
same key) or falls back to a structural summary.

A missing reference and an evicted snapshot are ordinary outcomes, not
errors.  They come back as a :class:`DriftCheck` with a reason string and
are logged at WARNING.
"""

from __future__ import annotations

import logging

import pandas as pd

from drift_engine.cache.snapshot_store import SnapshotStore
from drift_engine.diff.row_diff import diff_tables
from drift_engine.diff.structural_diff import compute_structural_summary
from drift_engine.hashing.fingerprint import fingerprint_of, fingerprint_of_columns
from drift_engine.models.drift import DriftCheck, DriftReport, DriftStatus
from drift_engine.models.snapshot import Snapshot
from drift_engine.tracking.keyed_table import KeyedTable

logger = logging.getLogger(__name__)

NO_REFERENCE_REASON = "No snapshot reference found. Stamp the table first."
SNAPSHOT_NOT_FOUND_REASON = (
    "Snapshot not found in cache (reference {ref}...). "
    "It may have been evicted or recorded by a previous process."
)


def _as_keyed(current: KeyedTable | pd.DataFrame) -> KeyedTable:
    if isinstance(current, KeyedTable):
        return current
    return KeyedTable(frame=current)


class DriftReporter:
    """Check tables for drift against snapshots held in *store*."""

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def check(
        self,
        current: KeyedTable | pd.DataFrame,
        reference_fingerprint: str | None = None,
    ) -> DriftCheck:
        """Compare *current* against its reference snapshot.

        Parameters
        ----------
        current:
            The table to check.  A bare frame is treated as unkeyed with
            no attached reference.
        reference_fingerprint:
            Fingerprint to compare against.  Defaults to the reference
            attached to *current*.
        """
        table = _as_keyed(current)
        ref = reference_fingerprint or table.snapshot_ref

        if ref is None:
            logger.warning(NO_REFERENCE_REASON, extra={"drift": {"status": DriftStatus.NO_REFERENCE.value}})
            return DriftCheck(status=DriftStatus.NO_REFERENCE, reason=NO_REFERENCE_REASON)

        snapshot = self._store.get(ref)
        if snapshot is None:
            reason = SNAPSHOT_NOT_FOUND_REASON.format(ref=ref[:8])
            logger.warning(
                reason,
                extra={"drift": {"status": DriftStatus.SNAPSHOT_NOT_FOUND.value, "reference": ref[:12]}},
            )
            return DriftCheck(status=DriftStatus.SNAPSHOT_NOT_FOUND, reason=reason)

        report = self._build_report(snapshot, table)
        detail = "diff" if report.diff is not None else "structural"
        logger.debug(
            "Drift check against fp=%s: has_drift=%s detail=%s",
            ref[:12],
            report.has_drift,
            detail,
            extra={
                "drift": {
                    "status": DriftStatus.REPORTED.value,
                    "reference": ref[:12],
                    "has_drift": report.has_drift,
                    "detail": detail,
                }
            },
        )
        return DriftCheck(status=DriftStatus.REPORTED, report=report)

    def _build_report(self, snapshot: Snapshot, table: KeyedTable) -> DriftReport:
        frame = table.frame
        current_fp = fingerprint_of(frame)

        key_before = snapshot.key_columns
        key_after = table.key_columns
        both_keyed = bool(key_before) and bool(key_after)

        diff = None
        structural_summary = None
        if both_keyed and key_before == key_after and all(name in frame.columns for name in key_after):
            diff = diff_tables(snapshot.payload, key_before, frame)
        else:
            structural_summary = compute_structural_summary(snapshot.payload, frame)

        key_values_changed = False
        if both_keyed:
            key_values_changed = fingerprint_of_columns(snapshot.payload, key_before) != fingerprint_of_columns(
                frame, key_after
            )

        return DriftReport(
            reference_fingerprint=snapshot.fingerprint,
            reference_created_at=snapshot.created_at,
            reference_label=snapshot.label,
            current_fingerprint=current_fp,
            has_drift=current_fp != snapshot.fingerprint,
            diff=diff,
            structural_summary=structural_summary,
            key_lost=bool(key_before) != bool(key_after),
            key_values_changed=key_values_changed,
            key_columns_before=key_before,
            key_columns_after=key_after,
        )


def check_drift(
    current: KeyedTable | pd.DataFrame,
    reference_fingerprint: str | None,
    store: SnapshotStore,
) -> DriftReport | None:
    """Return the drift report for *current*, or ``None`` on a cache miss.

    The reason for a ``None`` result is logged at WARNING; use
    :meth:`DriftReporter.check` to receive it as a value.
    """
    return DriftReporter(store).check(current, reference_fingerprint).report
