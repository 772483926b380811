"""Diff models for comparing two versions of a keyed table.

A :class:`DiffResult` is computed fresh on every call to the diff engine
and is never cached.
"""

from __future__ import annotations

from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field


class CellChange(BaseModel):
    """A single changed cell in a matched row."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    key: tuple[Any, ...] = Field(
        ...,
        description="Key tuple of the row, as it appears on the reference side.",
    )
    old_value: Any = Field(default=None, description="Reference-side cell value.")
    new_value: Any = Field(default=None, description="Current-side cell value.")


class DiffResult(BaseModel):
    """Row- and cell-level diff between a reference and a current table.

    Row counts satisfy ``removed + modified + unchanged == len(reference)``
    and ``added + modified + unchanged == len(current)``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    key_columns: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Key columns used to align rows.",
    )
    removed_row_count: int = Field(default=0, ge=0)
    added_row_count: int = Field(default=0, ge=0)
    modified_row_count: int = Field(default=0, ge=0)
    unchanged_row_count: int = Field(default=0, ge=0)
    removed_rows: pd.DataFrame = Field(
        ...,
        description="Full reference-side rows with no counterpart, in original order.",
    )
    added_rows: pd.DataFrame = Field(
        ...,
        description="Full current-side rows with no counterpart, in original order.",
    )
    per_column_changes: dict[str, list[CellChange]] = Field(
        default_factory=dict,
        description="Changed cells per value column; only columns with changes.",
    )
    columns_only_in_reference: list[str] = Field(default_factory=list)
    columns_only_in_current: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.removed_row_count
            or self.added_row_count
            or self.modified_row_count
            or self.columns_only_in_reference
            or self.columns_only_in_current
        )

    @property
    def changed_columns(self) -> list[str]:
        return list(self.per_column_changes)

    def changes_frame(self, column: str) -> pd.DataFrame:
        """Return the changes for *column* as a frame of key columns plus ``old``/``new``.

        An unchanged or unknown column yields an empty frame with the same
        column layout.
        """
        changes = self.per_column_changes.get(column, [])
        records = [
            {**dict(zip(self.key_columns, change.key, strict=True)), "old": change.old_value, "new": change.new_value}
            for change in changes
        ]
        return pd.DataFrame.from_records(records, columns=[*self.key_columns, "old", "new"])
