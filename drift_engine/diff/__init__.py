"""Deterministic diff engine for table comparison."""

from drift_engine.diff.row_diff import cells_equal, diff_tables, is_missing
from drift_engine.diff.structural_diff import compute_structural_summary
from drift_engine.models.diff import CellChange, DiffResult

__all__ = [
    "CellChange",
    "DiffResult",
    "cells_equal",
    "compute_structural_summary",
    "diff_tables",
    "is_missing",
]
