"""Shared fixtures for drift engine tests.

Provides a deterministic clock for snapshot timestamps, a fresh store per
test, and small reusable frames so that individual test modules stay
concise.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pandas as pd
import pytest

from drift_engine.cache import SnapshotStore


class TickClock:
    """Returns a strictly increasing timestamp, one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value


# ------------------------------------------------------------------ #
# Store
# ------------------------------------------------------------------ #


@pytest.fixture()
def clock() -> TickClock:
    return TickClock()


@pytest.fixture()
def store(clock: TickClock) -> SnapshotStore:
    return SnapshotStore(clock=clock)


# ------------------------------------------------------------------ #
# Frames
# ------------------------------------------------------------------ #


@pytest.fixture()
def letters_frame() -> pd.DataFrame:
    return pd.DataFrame({"id": [1, 2, 3], "x": ["a", "b", "c"]})


@pytest.fixture()
def orders_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "order_id": [101, 102, 103, 104],
            "customer": ["acme", "globex", "acme", "initech"],
            "amount": [25.0, 40.5, 12.25, 99.0],
            "shipped": [True, False, True, False],
        }
    )
