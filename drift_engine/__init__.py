"""Snapshot cache and key-aligned diff engine for tracking table drift."""

from drift_engine.cache import SnapshotStore
from drift_engine.config import DriftSettings, load_settings
from drift_engine.diff import compute_structural_summary, diff_tables
from drift_engine.drift import DriftReporter, check_drift
from drift_engine.errors import (
    ConfigurationError,
    DriftEngineError,
    InvalidKeyError,
    MissingColumnError,
)
from drift_engine.hashing import fingerprint_of, fingerprint_of_columns
from drift_engine.models import (
    CellChange,
    DiffResult,
    DriftCheck,
    DriftReport,
    DriftStatus,
    Snapshot,
    SnapshotInfo,
    StructuralSummary,
)
from drift_engine.telemetry import configure_logging
from drift_engine.tracking import KeyedTable

__version__ = "0.1.0"

__all__ = [
    "CellChange",
    "ConfigurationError",
    "DiffResult",
    "DriftCheck",
    "DriftEngineError",
    "DriftReport",
    "DriftReporter",
    "DriftSettings",
    "DriftStatus",
    "InvalidKeyError",
    "KeyedTable",
    "MissingColumnError",
    "Snapshot",
    "SnapshotInfo",
    "SnapshotStore",
    "StructuralSummary",
    "check_drift",
    "compute_structural_summary",
    "configure_logging",
    "diff_tables",
    "fingerprint_of",
    "fingerprint_of_columns",
    "load_settings",
]
