"""Bookkeeping context carried through transformation steps."""

from drift_engine.tracking.keyed_table import KeyedTable

__all__ = ["KeyedTable"]
