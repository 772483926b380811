"""Drift reporting against recorded snapshots."""

from drift_engine.drift.reporter import DriftReporter, check_drift

__all__ = ["DriftReporter", "check_drift"]
