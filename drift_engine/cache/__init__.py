"""Bounded in-memory snapshot cache."""

from drift_engine.cache.snapshot_store import SnapshotStore, measure_payload_size

__all__ = ["SnapshotStore", "measure_payload_size"]
