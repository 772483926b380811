"""Domain models for the drift engine."""

from drift_engine.models.diff import CellChange, DiffResult
from drift_engine.models.drift import DriftCheck, DriftReport, DriftStatus, StructuralSummary
from drift_engine.models.snapshot import Snapshot, SnapshotInfo

__all__ = [
    "CellChange",
    "DiffResult",
    "DriftCheck",
    "DriftReport",
    "DriftStatus",
    "Snapshot",
    "SnapshotInfo",
    "StructuralSummary",
]
