"""Tests for the schema-level fallback comparison."""

from __future__ import annotations

import pandas as pd

from drift_engine.diff import compute_structural_summary


class TestStructuralSummary:
    def test_identical(self, letters_frame):
        summary = compute_structural_summary(letters_frame, letters_frame.copy())
        assert summary.rows_before == 3
        assert summary.rows_after == 3
        assert summary.row_delta == 0
        assert summary.columns_added == []
        assert summary.columns_removed == []
        assert summary.rows_changed is False

    def test_row_delta(self, orders_frame):
        summary = compute_structural_summary(orders_frame, orders_frame.head(1))
        assert summary.rows_before == 4
        assert summary.rows_after == 1
        assert summary.row_delta == -3
        assert summary.rows_changed is True

    def test_columns_added_and_removed(self):
        reference = pd.DataFrame({"a": [1], "b": [2], "c": [3]})
        current = pd.DataFrame({"c": [3], "z": [0], "a": [1], "y": [0]})
        summary = compute_structural_summary(reference, current)
        assert summary.columns_added == ["z", "y"]
        assert summary.columns_removed == ["b"]

    def test_values_not_compared(self, letters_frame):
        changed = letters_frame.assign(x=["q", "r", "s"])
        summary = compute_structural_summary(letters_frame, changed)
        assert summary.row_delta == 0
        assert summary.columns_added == []
        assert summary.columns_removed == []

    def test_non_string_column_names(self):
        reference = pd.DataFrame({0: [1], 1: [2]})
        current = pd.DataFrame({0: [1], 2: [2]})
        summary = compute_structural_summary(reference, current)
        assert summary.columns_added == ["2"]
        assert summary.columns_removed == ["1"]
