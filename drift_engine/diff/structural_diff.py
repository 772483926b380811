"""Structural (schema-level) comparison of two tables.

This is the fallback when no shared key is available for a row-level
diff: only row counts and column names are compared, no cell values.
Column lists keep the order in which the columns appear in their table.
"""

from __future__ import annotations

import pandas as pd

from drift_engine.models.drift import StructuralSummary


def compute_structural_summary(
    reference_table: pd.DataFrame,
    current_table: pd.DataFrame,
) -> StructuralSummary:
    """Compare row counts and column sets of two tables.

    Parameters
    ----------
    reference_table:
        The captured (old) table.
    current_table:
        The current (new) table.

    Returns
    -------
    StructuralSummary
    """
    reference_columns = set(reference_table.columns)
    current_columns = set(current_table.columns)

    # Columns present in current but absent from reference.
    columns_added = [str(name) for name in current_table.columns if name not in reference_columns]

    # Columns present in reference but absent from current.
    columns_removed = [str(name) for name in reference_table.columns if name not in current_columns]

    rows_before = len(reference_table)
    rows_after = len(current_table)

    return StructuralSummary(
        rows_before=rows_before,
        rows_after=rows_after,
        row_delta=rows_after - rows_before,
        columns_added=columns_added,
        columns_removed=columns_removed,
    )
