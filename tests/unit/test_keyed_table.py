"""Tests for KeyedTable bookkeeping: keys, stamps, watch mode and pipe."""

from __future__ import annotations

import logging

import pandas as pd
import pytest

from drift_engine.errors import InvalidKeyError, MissingColumnError
from drift_engine.hashing import fingerprint_of
from drift_engine.tracking import KeyedTable

# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestKeys:
    def test_key_attaches_columns(self, orders_frame):
        table = KeyedTable.key(orders_frame, "order_id")
        assert table.key_columns == ("order_id",)
        assert table.has_key is True
        assert table.key_is_unique() is True
        assert table.frame is orders_frame

    def test_key_requires_columns(self, orders_frame):
        with pytest.raises(InvalidKeyError):
            KeyedTable.key(orders_frame)

    def test_key_missing_column(self, orders_frame):
        with pytest.raises(MissingColumnError) as exc_info:
            KeyedTable.key(orders_frame, "order_id", "region")
        assert exc_info.value.missing == ("region",)

    def test_non_unique_key_warns(self, orders_frame, caplog):
        with caplog.at_level(logging.WARNING, logger="drift_engine"):
            table = KeyedTable.key(orders_frame, "customer")
        assert table.key_columns == ("customer",)
        assert table.key_is_unique() is False
        assert "not unique" in caplog.text

    def test_validate_false_skips_check(self, orders_frame, caplog):
        with caplog.at_level(logging.WARNING, logger="drift_engine"):
            KeyedTable.key(orders_frame, "customer", validate=False)
        assert "not unique" not in caplog.text

    def test_unkey(self, orders_frame):
        table = KeyedTable.key(orders_frame, "order_id").unkey()
        assert table.has_key is False
        assert table.key_is_unique() is False

    def test_frame_is_not_annotated(self, orders_frame):
        KeyedTable.key(orders_frame, "order_id")
        assert orders_frame.attrs == {}

    def test_fingerprint_matches_frame(self, orders_frame):
        assert KeyedTable(frame=orders_frame).fingerprint() == fingerprint_of(orders_frame)


# ---------------------------------------------------------------------------
# with_frame
# ---------------------------------------------------------------------------


class TestWithFrame:
    def test_keeps_key_and_reference(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").stamp(store)
        result = table.with_frame(orders_frame.assign(amount=0.0))
        assert result.key_columns == ("order_id",)
        assert result.snapshot_ref == table.snapshot_ref

    def test_dropped_key_column_unkeys(self, orders_frame, caplog):
        table = KeyedTable.key(orders_frame, "order_id")
        with caplog.at_level(logging.WARNING, logger="drift_engine"):
            result = table.with_frame(orders_frame.drop(columns=["order_id"]))
        assert result.has_key is False
        assert "order_id" in caplog.text

    def test_row_count_change_with_duplicates_unkeys(self, orders_frame):
        table = KeyedTable.key(orders_frame, "order_id")
        doubled = pd.concat([orders_frame, orders_frame.head(1)], ignore_index=True)
        assert table.with_frame(doubled).has_key is False

    def test_filtered_rows_stay_keyed(self, orders_frame):
        table = KeyedTable.key(orders_frame, "order_id")
        assert table.with_frame(orders_frame.head(2)).has_key is True

    def test_same_row_count_keeps_non_unique_key(self, orders_frame):
        table = KeyedTable.key(orders_frame, "customer", validate=False)
        assert table.with_frame(orders_frame.copy()).key_columns == ("customer",)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


class TestStamp:
    def test_stamp_records_and_references(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").stamp(store, label="raw")
        assert table.snapshot_ref == fingerprint_of(orders_frame)
        snapshot = store.get(table.snapshot_ref)
        assert snapshot.label == "raw"
        assert snapshot.key_columns == ("order_id",)

    def test_stamp_logs_commit(self, orders_frame, store, caplog):
        with caplog.at_level(logging.INFO, logger="drift_engine"):
            table = KeyedTable(frame=orders_frame).stamp(store)
        assert f"Snapshot committed: {table.snapshot_ref[:8]}" in caplog.text
        (record,) = [r for r in caplog.records if r.getMessage().startswith("Snapshot committed")]
        assert record.snapshot["rows"] == 4

    def test_stamp_returns_new_table(self, orders_frame, store):
        table = KeyedTable(frame=orders_frame)
        stamped = table.stamp(store)
        assert table.snapshot_ref is None
        assert stamped is not table

    def test_clear_snapshot_keeps_store_entry(self, orders_frame, store):
        table = KeyedTable(frame=orders_frame).stamp(store)
        cleared = table.clear_snapshot()
        assert cleared.snapshot_ref is None
        assert table.snapshot_ref in store

    def test_clear_snapshot_purge(self, orders_frame, store):
        table = KeyedTable(frame=orders_frame).stamp(store)
        cleared = table.clear_snapshot(store, purge=True)
        assert cleared.snapshot_ref is None
        assert table.snapshot_ref not in store

    def test_purge_uses_watched_store(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").watch(store)
        table.clear_snapshot(purge=True)
        assert store.entry_count == 0

    def test_purge_without_store(self, orders_frame):
        with pytest.raises(ValueError, match="purge"):
            KeyedTable(frame=orders_frame).clear_snapshot(purge=True)

    def test_purge_with_empty_store(self, orders_frame, store):
        cleared = KeyedTable(frame=orders_frame).clear_snapshot(store, purge=True)
        assert cleared.snapshot_ref is None


# ---------------------------------------------------------------------------
# Watch mode and pipe
# ---------------------------------------------------------------------------


class TestWatchPipe:
    def test_watch_requires_key(self, orders_frame, store):
        with pytest.raises(InvalidKeyError, match="requires keyed data"):
            KeyedTable(frame=orders_frame).watch(store)
        assert store.entry_count == 0

    def test_watch_stamps_baseline(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").watch(store, label="baseline")
        assert table.watched is True
        assert table.store is store
        assert store.get(table.snapshot_ref).label == "baseline"

    def test_unwatch(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").watch(store).unwatch()
        assert table.watched is False
        assert table.store is None
        assert table.snapshot_ref is not None

    def test_pipe_stamps_pre_state(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").watch(store)
        step1 = table.pipe(lambda df: df.assign(amount=df["amount"] * 2))
        step2 = step1.pipe(lambda df: df[df["amount"] > 50])

        assert step2.snapshot_ref == fingerprint_of(step1.frame)
        assert store.entry_count == 2

    def test_pipe_passes_arguments(self, orders_frame):
        table = KeyedTable.key(orders_frame, "order_id")
        result = table.pipe(lambda df, n, *, column: df.nlargest(n, column), 2, column="amount")
        assert result.frame["order_id"].tolist() == [104, 102]

    def test_unwatched_pipe_does_not_stamp(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").stamp(store)
        result = table.pipe(lambda df: df.head(2))
        assert result.snapshot_ref == table.snapshot_ref
        assert store.entry_count == 1

    def test_pipe_rejects_non_frame(self, orders_frame):
        table = KeyedTable.key(orders_frame, "order_id")
        with pytest.raises(TypeError, match="must return a DataFrame"):
            table.pipe(lambda df: df["amount"].sum())

    def test_pipe_keeps_watch_state(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").watch(store)
        result = table.pipe(lambda df: df.head(3))
        assert result.watched is True
        assert result.store is store


# ---------------------------------------------------------------------------
# Drift shortcuts
# ---------------------------------------------------------------------------


class TestCheck:
    def test_check_requires_store(self, orders_frame):
        with pytest.raises(ValueError, match="store"):
            KeyedTable(frame=orders_frame).check()

    def test_check_drift_uses_watched_store(self, orders_frame, store):
        table = KeyedTable.key(orders_frame, "order_id").watch(store)
        report = table.pipe(lambda df: df.head(3)).check_drift()
        assert report.diff.removed_row_count == 1

    def test_check_drift_none_without_reference(self, orders_frame, store):
        assert KeyedTable(frame=orders_frame).check_drift(store) is None
