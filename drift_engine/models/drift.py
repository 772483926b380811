"""Drift report models.

A :class:`DriftReport` carries either a cell-level :class:`DiffResult`
(when both sides share a key) or a :class:`StructuralSummary`, never both.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from drift_engine.models.diff import DiffResult


class DriftStatus(str, Enum):
    """Outcome of a drift check."""

    REPORTED = "REPORTED"
    NO_REFERENCE = "NO_REFERENCE"
    SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"


class StructuralSummary(BaseModel):
    """Schema-level comparison used when a cell-level diff is not computable."""

    model_config = ConfigDict(frozen=True)

    rows_before: int = Field(..., ge=0)
    rows_after: int = Field(..., ge=0)
    row_delta: int = 0
    columns_added: list[str] = Field(default_factory=list)
    columns_removed: list[str] = Field(default_factory=list)

    @property
    def rows_changed(self) -> bool:
        return self.rows_before != self.rows_after


class DriftReport(BaseModel):
    """Comparison of a current table against a recorded snapshot."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    reference_fingerprint: str = Field(..., min_length=1)
    reference_created_at: datetime
    reference_label: str | None = None
    current_fingerprint: str = Field(..., min_length=1)
    has_drift: bool
    diff: DiffResult | None = None
    structural_summary: StructuralSummary | None = None
    key_lost: bool = False
    key_values_changed: bool = False
    key_columns_before: tuple[str, ...] = ()
    key_columns_after: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _exactly_one_detail(self) -> DriftReport:
        if (self.diff is None) == (self.structural_summary is None):
            raise ValueError("DriftReport requires exactly one of diff or structural_summary")
        return self


class DriftCheck(BaseModel):
    """Result of a drift check, including the cache-miss outcomes."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    status: DriftStatus
    report: DriftReport | None = None
    reason: str | None = Field(
        default=None,
        description="Human-readable explanation when no report was produced.",
    )

    @property
    def found(self) -> bool:
        return self.status is DriftStatus.REPORTED
