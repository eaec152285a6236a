"""Tests for fairrate.analytics: upsert-increment counters and windowed queries."""
from __future__ import annotations

import threading
from unittest.mock import MagicMock

from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from fairrate.analytics import AnalyticsAggregator, clamp_days
from tests.fakes import FakeCollection


def _seed_days(collection: FakeCollection, days: int) -> None:
    for i in range(1, days + 1):
        collection.insert_one({"date": f"2026-01-{i:02d}", "views": i, "calculations": 1})


# =====================================================================
# increment
# =====================================================================

class TestIncrement:

    def test_two_views_same_day_one_row(self, analytics, stats_collection):
        assert analytics.increment("views") is True
        assert analytics.increment("views") is True
        rows = list(stats_collection.find({}))
        assert len(rows) == 1
        assert rows[0]["date"] == "2026-03-14"
        assert rows[0]["views"] == 2
        assert rows[0]["calculations"] == 0

    def test_other_counter_defaults_to_zero(self, analytics, stats_collection):
        analytics.increment("calculations", amount=3)
        row = stats_collection.find_one({"date": "2026-03-14"})
        assert row["calculations"] == 3
        assert row["views"] == 0

    def test_new_day_new_row(self, analytics, stats_collection, clock):
        analytics.increment("views")
        clock.advance(days=1)
        analytics.increment("views")
        assert sorted(d["date"] for d in stats_collection.find({})) == ["2026-03-14", "2026-03-15"]

    def test_timestamps(self, analytics, stats_collection, clock):
        created = clock.now
        analytics.increment("views")
        clock.advance(hours=2)
        analytics.increment("calculations")
        row = stats_collection.find_one({"date": "2026-03-14"})
        assert row["createdAt"] == created
        assert row["updatedAt"] == clock.now

    def test_unknown_counter_is_ignored(self, analytics, stats_collection):
        assert analytics.increment("clicks") is False
        assert stats_collection.count_documents({}) == 0

    def test_store_failure_is_swallowed(self, clock, caplog):
        coll = MagicMock()
        coll.update_one.side_effect = ServerSelectionTimeoutError("no servers")
        assert AnalyticsAggregator(coll, clock=clock).increment("views") is False
        assert "Error updating stats" in caplog.text

    def test_duplicate_key_race_is_retried(self, clock):
        coll = MagicMock()
        coll.update_one.side_effect = [DuplicateKeyError("dup"), MagicMock()]
        assert AnalyticsAggregator(coll, clock=clock).increment("views") is True
        assert coll.update_one.call_count == 2

    def test_concurrent_increments_do_not_lose_updates(self, analytics, stats_collection):
        def worker():
            for _ in range(50):
                analytics.increment("views")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        rows = list(stats_collection.find({}))
        assert len(rows) == 1
        assert rows[0]["views"] == 400


# =====================================================================
# query
# =====================================================================

class TestQuery:

    def test_window_is_bounded(self, analytics, stats_collection):
        _seed_days(stats_collection, 30)
        window = analytics.query(7)
        assert len(window.rows) == 7

    def test_newest_first_and_totals_over_window(self, analytics, stats_collection):
        _seed_days(stats_collection, 10)
        window = analytics.query(3)
        assert [r["date"] for r in window.rows] == ["2026-01-10", "2026-01-09", "2026-01-08"]
        assert window.total_views == 10 + 9 + 8
        assert window.total_calculations == 3

    def test_clamped_to_ninety(self, analytics, stats_collection):
        for i in range(120):
            stats_collection.insert_one({"date": f"2025-{i:04d}", "views": 1, "calculations": 0})
        window = analytics.query(500)
        assert len(window.rows) == 90
        assert window.total_views == 90

    def test_rows_expose_counters_only(self, analytics, stats_collection):
        analytics.increment("views")
        row = analytics.query(1).rows[0]
        assert set(row) == {"date", "views", "calculations"}

    def test_empty_store(self, analytics):
        data = analytics.query(30).to_dict()
        assert data == {
            "stats": [],
            "totals": {"totalViews": 0, "totalCalculations": 0},
            "period": "Last 0 days",
        }


class TestClampDays:

    def test_bounds(self):
        assert clamp_days(0) == 1
        assert clamp_days(-10) == 1
        assert clamp_days(45) == 45
        assert clamp_days(91) == 90
