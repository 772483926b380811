"""Key-aligned row and cell diff between two versions of a table.

Rows are aligned on the reference key columns.  Every reference row is
classified as removed, modified or unchanged and every current row as
added, modified or unchanged.  Cell comparison is NA-safe: two nulls are
equal, a null and a value are not, and anything else uses the values'
natural ``==`` (exact for floats; pre-round if tolerance is needed).

Duplicate key tuples are not expected (the key layer guarantees
uniqueness) but are handled deterministically: reference rows are taken
in order and each is paired with the first not-yet-paired current row
with the same key.  Surplus duplicates on either side stay unpaired and
are reported as removed or added, so every row lands in exactly one
bucket.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Hashable, Sequence
from typing import Any

import numpy as np
import pandas as pd

from drift_engine.errors import InvalidKeyError, MissingColumnError
from drift_engine.models.diff import CellChange, DiffResult

logger = logging.getLogger(__name__)


# Stands in for every null marker (None, NaN, NaT, pd.NA) inside a key tuple.
_NULL_KEY = object()


def is_missing(value: Any) -> bool:
    """Return ``True`` for scalar null markers (None, NaN, NaT, pd.NA)."""
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def cells_equal(old: Any, new: Any) -> bool:
    """NA-safe cell equality."""
    old_missing = is_missing(old)
    new_missing = is_missing(new)
    if old_missing or new_missing:
        return old_missing and new_missing
    try:
        return bool(old == new)
    except (TypeError, ValueError):
        # Array-like cells or types with no boolean equality.
        return False


def _raw_keys(frame: pd.DataFrame, key_columns: Sequence[str]) -> list[tuple[Any, ...]]:
    # First occurrence of each key name; frames may repeat column names.
    names = list(frame.columns)
    columns = [frame.iloc[:, names.index(name)].tolist() for name in key_columns]
    return list(zip(*columns, strict=True))


def _pair_value_columns(
    reference: pd.DataFrame,
    current: pd.DataFrame,
    keys: tuple[str, ...],
) -> list[tuple[Hashable, int, int]]:
    """Pair non-key columns by name as ``(name, reference_position, current_position)``.

    A repeated name pairs its k-th occurrence on each side.  Pairs follow
    reference column order.
    """
    available: dict[Hashable, deque[int]] = defaultdict(deque)
    for position, name in enumerate(current.columns):
        if name not in keys:
            available[name].append(position)

    pairs: list[tuple[Hashable, int, int]] = []
    for position, name in enumerate(reference.columns):
        if name in keys:
            continue
        candidates = available.get(name)
        if candidates:
            pairs.append((name, position, candidates.popleft()))
    return pairs


def _match_keys(raw_keys: list[tuple[Any, ...]]) -> list[tuple[Hashable, ...]]:
    return [tuple(_NULL_KEY if is_missing(value) else value for value in key) for key in raw_keys]


def _pair_rows(
    reference_keys: list[tuple[Hashable, ...]],
    current_keys: list[tuple[Hashable, ...]],
) -> tuple[list[tuple[int, int]], list[int], list[int]]:
    """Pair row positions by key, first occurrence first.

    Returns ``(pairs, removed_positions, added_positions)``, with pairs and
    removed positions in reference order and added positions in current
    order.
    """
    available: dict[tuple[Hashable, ...], deque[int]] = defaultdict(deque)
    for position, key in enumerate(current_keys):
        available[key].append(position)

    pairs: list[tuple[int, int]] = []
    removed: list[int] = []
    for ref_position, key in enumerate(reference_keys):
        candidates = available.get(key)
        if candidates:
            pairs.append((ref_position, candidates.popleft()))
        else:
            removed.append(ref_position)

    paired_current = {cur_position for _, cur_position in pairs}
    added = [position for position in range(len(current_keys)) if position not in paired_current]
    return pairs, removed, added


def _validate_keys(
    reference: pd.DataFrame,
    key_columns: Sequence[str],
    current: pd.DataFrame,
) -> tuple[str, ...]:
    if isinstance(key_columns, str):
        key_columns = (key_columns,)
    keys = tuple(key_columns)
    if not keys:
        raise InvalidKeyError("At least one key column must be specified.")

    missing_in_reference = [name for name in keys if name not in reference.columns]
    if missing_in_reference:
        raise MissingColumnError(missing_in_reference, where="reference table")

    missing_in_current = [name for name in keys if name not in current.columns]
    if missing_in_current:
        raise MissingColumnError(missing_in_current, where="current table")

    return keys


def diff_tables(
    reference_table: pd.DataFrame,
    reference_key_columns: Sequence[str],
    current_table: pd.DataFrame,
) -> DiffResult:
    """Compare *current_table* against *reference_table* row by row.

    Parameters
    ----------
    reference_table:
        The old (reference) state.
    reference_key_columns:
        Ordered key columns used to align rows.  Must be non-empty and
        present in both tables.
    current_table:
        The new state.  May add or drop non-key columns.

    Returns
    -------
    DiffResult

    Raises
    ------
    InvalidKeyError
        If *reference_key_columns* is empty.
    MissingColumnError
        If a key column is absent from either table.
    """
    keys = _validate_keys(reference_table, reference_key_columns, current_table)

    reference_raw_keys = _raw_keys(reference_table, keys)
    reference_keys = _match_keys(reference_raw_keys)
    current_keys = _match_keys(_raw_keys(current_table, keys))
    pairs, removed_positions, added_positions = _pair_rows(reference_keys, current_keys)

    surplus = len(reference_keys) - len(set(reference_keys)) + len(current_keys) - len(set(current_keys))
    if surplus:
        logger.warning(
            "Duplicate key tuples on key %s (%d surplus row(s)); pairing by first occurrence",
            list(keys),
            surplus,
        )

    current_columns = set(current_table.columns)
    reference_columns = set(reference_table.columns)
    value_columns = _pair_value_columns(reference_table, current_table, keys)

    per_column_changes: dict[str, list[CellChange]] = {}
    row_changed = np.zeros(len(pairs), dtype=bool)

    if pairs and value_columns:
        ref_positions = [ref for ref, _ in pairs]
        cur_positions = [cur for _, cur in pairs]

        for name, ref_column, cur_column in value_columns:
            old_values = reference_table.iloc[:, ref_column].to_numpy(dtype=object)[ref_positions]
            new_values = current_table.iloc[:, cur_column].to_numpy(dtype=object)[cur_positions]
            changed = np.fromiter(
                (not cells_equal(old, new) for old, new in zip(old_values, new_values, strict=True)),
                dtype=bool,
                count=len(pairs),
            )
            if not changed.any():
                continue

            row_changed |= changed
            # Repeated column names share one entry.
            per_column_changes.setdefault(str(name), []).extend(
                CellChange(
                    key=reference_raw_keys[ref_positions[i]],
                    old_value=old_values[i],
                    new_value=new_values[i],
                )
                for i in np.flatnonzero(changed)
            )

    modified = int(row_changed.sum())

    result = DiffResult(
        key_columns=keys,
        removed_row_count=len(removed_positions),
        added_row_count=len(added_positions),
        modified_row_count=modified,
        unchanged_row_count=len(pairs) - modified,
        removed_rows=reference_table.iloc[removed_positions],
        added_rows=current_table.iloc[added_positions],
        per_column_changes=per_column_changes,
        columns_only_in_reference=[str(name) for name in reference_table.columns if name not in current_columns],
        columns_only_in_current=[str(name) for name in current_table.columns if name not in reference_columns],
    )

    logger.debug(
        "Diff on %s: removed=%d added=%d modified=%d unchanged=%d",
        list(keys),
        result.removed_row_count,
        result.added_row_count,
        result.modified_row_count,
        result.unchanged_row_count,
    )
    return result
