"""Snapshot models for captured point-in-time table state.

A snapshot is keyed by the content fingerprint of the table it captured.
``created_at`` is assigned once at record time and is the sole eviction
ordering; lookups never refresh it.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field


class Snapshot(BaseModel):
    """Immutable record of a captured table."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    fingerprint: str = Field(
        ...,
        min_length=1,
        description="Content fingerprint of the captured table.",
    )
    payload: pd.DataFrame = Field(
        ...,
        description="Deep copy of the captured table.  Owned by the store.",
    )
    payload_size: int = Field(
        ...,
        ge=0,
        description="Payload size in bytes, measured once at capture time.",
    )
    label: str | None = Field(
        default=None,
        description="Optional user-supplied label.",
    )
    key_columns: tuple[str, ...] = Field(
        default=(),
        description="Key columns attached to the table when it was recorded.",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when this snapshot was recorded.",
    )

    @property
    def row_count(self) -> int:
        return len(self.payload)

    @property
    def col_count(self) -> int:
        return len(self.payload.columns)

    @property
    def has_key(self) -> bool:
        return bool(self.key_columns)

    def info(self) -> SnapshotInfo:
        """Return the payload-free summary of this snapshot."""
        return SnapshotInfo(
            fingerprint=self.fingerprint,
            label=self.label,
            created_at=self.created_at,
            row_count=self.row_count,
            col_count=self.col_count,
            payload_size=self.payload_size,
            key_columns=self.key_columns,
        )


class SnapshotInfo(BaseModel):
    """Diagnostic view of a stored snapshot.  Never exposes the payload."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    label: str | None = None
    created_at: datetime
    row_count: int = Field(..., ge=0)
    col_count: int = Field(..., ge=0)
    payload_size: int = Field(..., ge=0)
    key_columns: tuple[str, ...] = ()

    @property
    def size_mb(self) -> float:
        return round(self.payload_size / (1024 * 1024), 4)
